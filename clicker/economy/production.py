"""Per-tick resource gain from clicks, automation and the idle boost."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from clicker.economy.boost import BoostScheduler
from clicker.economy.formulas import rare_chance, rare_value, split_at_goal
from clicker.engine.logger import ChannelLogger, null_channel
from clicker.upgrades.catalog import UpgradeCatalog
from clicker.upgrades.data import (
    AUTO_PRODUCTION_KINDS,
    BOOST_KIND,
    CLICK_KIND,
    HELPER_KIND,
    RARE_KIND,
    RARE_LUCK_KIND,
)


@dataclass(frozen=True)
class ProductionState:
    """Derived production rates. Rebuilt by :meth:`ProductionEngine.recompute`."""

    click_multiplier: int = 1
    auto_production_rate: float = 0.0
    auto_click_rate: float = 0.0
    temporary_boost_multiplier: float = 1.0
    # None means the boost holds until cancelled.
    temporary_boost_expiry: Optional[float] = None
    # 0 while no rare-item upgrade is held.
    rare_chance: float = 0.0


@dataclass
class PlateCounter:
    """Stage counters: units on the plate (capped at the goal) and past it."""

    goal: int
    produced: int = 0
    overflow: int = 0

    @property
    def total(self) -> int:
        return self.produced + self.overflow

    def reset(self, goal: int) -> None:
        self.goal = goal
        self.produced = 0
        self.overflow = 0


@dataclass(frozen=True)
class ClickOutcome:
    produced: int
    overflow_delta: int
    crossed_goal: bool
    rare_value: int = 0


class ProductionEngine:
    """Turns catalog effects and boost state into produced units."""

    def __init__(
        self,
        logger: Optional[ChannelLogger] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.state = ProductionState()
        self.logger = logger or null_channel("production")
        self.rng = rng
        self._production_carry = 0.0
        self._auto_click_carry = 0.0

    def recompute(self, catalog: UpgradeCatalog, boost: BoostScheduler) -> ProductionState:
        if self.rng is None:
            self.rng = catalog.rng
        boost.set_level(catalog.level_of(BOOST_KIND))
        rainbow = catalog.current_effect(RARE_KIND)
        rare = rare_chance(rainbow, catalog.current_effect(RARE_LUCK_KIND)) if rainbow > 0.0 else 0.0
        auto_rate = sum(catalog.current_effect(kind) for kind in AUTO_PRODUCTION_KINDS)
        click_effect = catalog.current_effect(CLICK_KIND)
        self.state = ProductionState(
            click_multiplier=max(1, int(click_effect)),
            auto_production_rate=max(0.0, auto_rate),
            auto_click_rate=max(0.0, catalog.current_effect(HELPER_KIND)),
            temporary_boost_multiplier=boost.current_multiplier,
            temporary_boost_expiry=None,
            rare_chance=rare,
        )
        self.logger.debug(
            "Production: click x%d, auto %.2f/s, helper %.2f/s, boost x%.2f",
            self.state.click_multiplier,
            self.state.auto_production_rate,
            self.state.auto_click_rate,
            self.state.temporary_boost_multiplier,
        )
        return self.state

    def reset_accumulators(self) -> None:
        self._production_carry = 0.0
        self._auto_click_carry = 0.0

    def add_units(self, counter: PlateCounter, units: int, rare: int = 0) -> ClickOutcome:
        """Put ``units`` plus a rare item worth ``rare`` on the plate in one step."""

        before = counter.total
        to_plate, to_overflow = split_at_goal(counter.produced, units + rare, counter.goal)
        counter.produced += to_plate
        counter.overflow += to_overflow
        crossed = before < counter.goal <= counter.total
        return ClickOutcome(counter.produced, to_overflow, crossed, rare)

    def roll_rare(self) -> int:
        """Units of a rare drop for one click, 0 when nothing drops."""

        chance = self.state.rare_chance
        if chance <= 0.0:
            return 0
        rng = self.rng or random
        if rng.random() >= chance:
            return 0
        value = rare_value(rng.random())
        self.logger.info("Rare item worth %d", value)
        return value

    def apply_click(self, counter: PlateCounter, is_manual: bool) -> ClickOutcome:
        return self.add_units(counter, self.state.click_multiplier, self.roll_rare())

    def tick_auto_production(self, counter: PlateCounter, elapsed: float, in_play: bool) -> Optional[ClickOutcome]:
        if not in_play or self.state.auto_production_rate <= 0.0 or elapsed <= 0.0:
            return None
        self._production_carry += (
            self.state.auto_production_rate * self.state.temporary_boost_multiplier * elapsed
        )
        units = int(self._production_carry)
        if units <= 0:
            return None
        self._production_carry -= units
        return self.add_units(counter, units)

    def tick_auto_clicks(self, elapsed: float, in_play: bool) -> int:
        if not in_play or self.state.auto_click_rate <= 0.0 or elapsed <= 0.0:
            return 0
        self._auto_click_carry += self.state.auto_click_rate * self.state.temporary_boost_multiplier * elapsed
        clicks = int(self._auto_click_carry)
        self._auto_click_carry -= clicks
        return clicks


__all__ = ["ProductionEngine", "ProductionState", "PlateCounter", "ClickOutcome"]
