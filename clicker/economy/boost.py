"""Idle-triggered production boost ("organizer")."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from clicker.economy.formulas import activation_threshold
from clicker.engine.logger import ChannelLogger, null_channel

DEFAULT_BOOST_MULTIPLIER = 1.5


@dataclass(frozen=True)
class BoostStatus:
    enabled: bool
    boosted: bool
    idle_seconds: float
    activation_threshold: float
    time_until_activation: float
    multiplier: float


class BoostScheduler:
    """Engages a boost after sustained idleness; a manual click cancels it.

    Auto clicks never touch the idle timer. Once engaged the boost lasts
    until the next manual click, not for a fixed duration.
    """

    def __init__(
        self,
        multiplier: float = DEFAULT_BOOST_MULTIPLIER,
        logger: Optional[ChannelLogger] = None,
    ) -> None:
        self.multiplier = max(1.0, multiplier)
        self.level = 0
        self.idle_seconds = 0.0
        self.is_boosted = False
        self.threshold = activation_threshold(1)
        self.logger = logger or null_channel("boost")
        self.on_change: Optional[Callable[[bool, float], None]] = None

    @property
    def enabled(self) -> bool:
        return self.level > 0

    @property
    def current_multiplier(self) -> float:
        return self.multiplier if self.is_boosted else 1.0

    def set_level(self, level: int) -> bool:
        """Apply a new organizer level; returns True if the boost was cancelled."""

        level = max(0, int(level))
        if level != self.level:
            self.logger.debug("Organizer level %d -> %d", self.level, level)
        self.level = level
        if level > 0:
            self.threshold = activation_threshold(level)
            return False
        return self._set_boosted(False)

    def on_tick(self, elapsed: float, in_play: bool) -> bool:
        if not self.enabled or not in_play:
            return False
        self.idle_seconds += max(0.0, elapsed)
        if not self.is_boosted and self.idle_seconds >= self.threshold:
            self.logger.info("Idle %.1fs, boost x%.2f engaged", self.idle_seconds, self.multiplier)
            return self._set_boosted(True)
        return False

    def on_manual_click(self) -> bool:
        self.idle_seconds = 0.0
        if self.is_boosted:
            self.logger.info("Manual click cancelled boost")
            return self._set_boosted(False)
        return False

    def on_auto_click(self) -> bool:
        return False

    def reset_for_stage(self) -> bool:
        self.idle_seconds = 0.0
        return self._set_boosted(False)

    def status(self) -> BoostStatus:
        return BoostStatus(
            enabled=self.enabled,
            boosted=self.is_boosted,
            idle_seconds=self.idle_seconds,
            activation_threshold=self.threshold,
            time_until_activation=max(0.0, self.threshold - self.idle_seconds) if self.enabled else float("inf"),
            multiplier=self.multiplier,
        )

    def _set_boosted(self, boosted: bool) -> bool:
        if boosted == self.is_boosted:
            return False
        self.is_boosted = boosted
        if self.on_change:
            self.on_change(boosted, self.current_multiplier)
        return True


__all__ = ["BoostScheduler", "BoostStatus", "DEFAULT_BOOST_MULTIPLIER"]
