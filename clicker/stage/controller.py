"""Stage state machine: countdown, play, resolution and between-stage flow."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, List, Optional

from clicker.config import GameConfig
from clicker.economy.boost import BoostScheduler
from clicker.economy.formulas import stage_goal
from clicker.economy.production import ClickOutcome, PlateCounter, ProductionEngine, ProductionState
from clicker.engine import events as ev
from clicker.engine.clock import NowProvider
from clicker.engine.events import EventHub
from clicker.engine.logger import ChannelLogger, GameLogger, null_channel
from clicker.errors import StateConflictError
from clicker.save import SUSPEND_SLOT, MemoryBackend, PersistenceBackend, PersistenceStore
from clicker.stage.phases import Phase
from clicker.stage.timers import DelayScheduler
from clicker.upgrades.catalog import UpgradeCatalog
from clicker.upgrades.data import UpgradeDefinition, UpgradeKind


@dataclass(frozen=True)
class StageResult:
    stage: int
    goal: int
    produced: int
    overflow: int
    cleared: bool
    time_used: float


class StageController:
    """Owns the stage phase and routes input, time and upgrades through it.

    All mutation happens from the caller's thread: ``on_manual_click``,
    ``on_auto_click`` and ``on_frame_tick`` are the only inputs during
    play, and the between-stage methods only act in their own phase.
    A call in the wrong phase is logged and answered with ``False``.
    """

    def __init__(
        self,
        catalog: UpgradeCatalog,
        config: Optional[GameConfig] = None,
        production: Optional[ProductionEngine] = None,
        boost: Optional[BoostScheduler] = None,
        events: Optional[EventHub] = None,
        store: Optional[PersistenceStore] = None,
        logger: Optional[ChannelLogger] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.catalog = catalog
        self.production = production or ProductionEngine()
        self.boost = boost or BoostScheduler(self.config.boost_multiplier)
        self.events = events or EventHub()
        self.store = store
        self.logger = logger or null_channel("stage")
        self.timers = DelayScheduler()
        self.boost.on_change = self._on_boost_change

        self._phase = Phase.MENU
        self._stage = 1
        self._counter = PlateCounter(goal=stage_goal(1))
        self._time_remaining = self.config.time_limit
        self._countdown_remaining = 0.0
        self._goal_reached = False
        self._offered: List[UpgradeDefinition] = []
        self._last_result: Optional[StageResult] = None
        self.last_produced_count = 0
        self.lifetime_produced = 0
        self.lifetime_overflow = 0
        self.stages_completed = 0
        self.manual_clicks = 0
        self._milestones_hit: set[int] = set()
        self.production.recompute(self.catalog, self.boost)

    @classmethod
    def from_config(
        cls,
        config: GameConfig,
        game_logger: Optional[GameLogger] = None,
        backend: Optional[PersistenceBackend] = None,
        clock: Optional[NowProvider] = None,
        rng: Optional[random.Random] = None,
    ) -> "StageController":
        """Wire a controller and its collaborators from one config."""

        def channel(name: str) -> ChannelLogger:
            return game_logger.channel(name) if game_logger else null_channel(name)

        if config.upgrade_data:
            catalog = UpgradeCatalog.load(config.upgrade_data, rng=rng, logger=channel("upgrades"))
        else:
            catalog = UpgradeCatalog.default(rng=rng, logger=channel("upgrades"))
        store = PersistenceStore(
            backend if backend is not None else MemoryBackend(),
            clock=clock,
            max_slots=config.max_save_slots,
            logger=channel("save"),
        )
        return cls(
            catalog,
            config=config,
            production=ProductionEngine(logger=channel("production"), rng=catalog.rng),
            boost=BoostScheduler(config.boost_multiplier, logger=channel("boost")),
            events=EventHub(logger=channel("stage")),
            store=store,
            logger=channel("stage"),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def current_stage(self) -> int:
        return self._stage

    @property
    def stage_goal(self) -> int:
        return self._counter.goal

    @property
    def remaining_time(self) -> float:
        return max(0.0, self._time_remaining)

    @property
    def countdown_remaining(self) -> float:
        return max(0.0, self._countdown_remaining) if self._phase is Phase.COUNTING_DOWN else 0.0

    @property
    def produced(self) -> int:
        return self._counter.produced

    @property
    def overflow(self) -> int:
        return self._counter.overflow

    @property
    def goal_reached(self) -> bool:
        return self._goal_reached

    @property
    def production_state(self) -> ProductionState:
        return self.production.state

    @property
    def offered_choices(self) -> List[UpgradeDefinition]:
        return list(self._offered)

    @property
    def last_result(self) -> Optional[StageResult]:
        return self._last_result

    @property
    def resume_stage(self) -> int:
        """Stage a save taken now should resume at."""

        if self._phase in (Phase.STAGE_CHOICE, Phase.SUSPENDED):
            return min(self._stage + 1, self.config.max_stage)
        return self._stage

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------
    def start(self) -> bool:
        if self._phase is not Phase.MENU:
            return self._reject("start")
        self._begin_stage()
        return True

    def on_manual_click(self) -> bool:
        if not self._phase.in_play:
            return False
        self._count_manual_click()
        if self.boost.on_manual_click():
            self.production.recompute(self.catalog, self.boost)
        self._apply_outcome(self.production.apply_click(self._counter, is_manual=True))
        return True

    def on_auto_click(self) -> bool:
        if not self._phase.in_play:
            return False
        self.boost.on_auto_click()
        self._apply_outcome(self.production.apply_click(self._counter, is_manual=False))
        return True

    def on_frame_tick(self, dt: float) -> None:
        if dt <= 0.0:
            return
        self.timers.advance(dt)
        if self._phase is Phase.COUNTING_DOWN:
            self._countdown_remaining -= dt
            if self._countdown_remaining <= 0.0:
                self._begin_play()
            return
        if not self._phase.in_play:
            return
        if self.boost.on_tick(dt, in_play=True):
            self.production.recompute(self.catalog, self.boost)
        outcome = self.production.tick_auto_production(self._counter, dt, in_play=True)
        if outcome is not None:
            self._apply_outcome(outcome)
        for _ in range(self.production.tick_auto_clicks(dt, in_play=self._phase.in_play)):
            if not self.on_auto_click():
                break
        if self._phase.in_play and not self._goal_reached and self._counter.total >= self._counter.goal:
            self.mark_goal_reached()
        if not self._phase.in_play:
            return
        self._time_remaining -= dt
        if self._time_remaining <= 1e-9:
            self._time_remaining = 0.0
            self._time_up()

    def mark_goal_reached(self) -> bool:
        """Enter GOAL_REACHED. Only the first call per stage has an effect."""

        try:
            self._claim_goal()
        except StateConflictError as exc:
            self.logger.warning("Goal ignored: %s", exc)
            return False
        self.logger.info(
            "Stage %d goal %d reached with %.1fs left",
            self._stage,
            self._counter.goal,
            self._time_remaining,
        )
        self._set_phase(Phase.GOAL_REACHED)
        self.events.emit(ev.GOAL_REACHED)
        if self.config.end_stage_on_goal:
            self._enter_resolving()
        return True

    # ------------------------------------------------------------------
    # Between stages
    # ------------------------------------------------------------------
    def choose_upgrade(self, kind: Any) -> bool:
        if self._phase is not Phase.UPGRADE_SELECTION:
            return self._reject("choose_upgrade")
        try:
            kind = UpgradeKind.parse(kind)
        except (KeyError, ValueError):
            self.logger.warning("Unknown upgrade %r", kind)
            return False
        if kind not in [choice.kind for choice in self._offered]:
            self.logger.warning("%s was not offered", kind.name)
            return False
        if not self.catalog.acquire(kind):
            return False
        self.production.recompute(self.catalog, self.boost)
        self.events.emit(ev.UPGRADE_ACQUIRED, kind, self.catalog.level_of(kind))
        self._offered = []
        self._set_phase(Phase.STAGE_CHOICE)
        return True

    def skip_upgrade(self) -> bool:
        if self._phase is not Phase.UPGRADE_SELECTION:
            return self._reject("skip_upgrade")
        self.logger.info("Upgrade skipped on stage %d", self._stage)
        self._offered = []
        self._set_phase(Phase.STAGE_CHOICE)
        return True

    def continue_to_next_stage(self) -> bool:
        if self._phase is not Phase.STAGE_CHOICE:
            return self._reject("continue_to_next_stage")
        self._stage = min(self._stage + 1, self.config.max_stage)
        cleared = self.catalog.clear_instant_effects_for_new_stage()
        if cleared:
            self.logger.info("Instant upgrades cleared: %s", [kind.name for kind in cleared])
        self._begin_stage()
        return True

    def suspend(self) -> bool:
        if self._phase is not Phase.STAGE_CHOICE:
            return self._reject("suspend")
        if self.store is None:
            self.logger.warning("No save store attached, cannot suspend")
            return False
        snapshot = self.store.snapshot(self, self.catalog, stage=self.resume_stage)
        if not self.store.save(SUSPEND_SLOT, snapshot):
            self.logger.error("Suspend save failed, staying on stage choice")
            return False
        self._set_phase(Phase.SUSPENDED)
        return True

    def retry(self) -> bool:
        if self._phase is not Phase.GAME_OVER:
            return self._reject("retry")
        self.logger.info("Retry from stage %d", self._stage)
        self._stage = 1
        self._reset_to_menu()
        return True

    def new_game(self) -> None:
        self.catalog.reset_all_to_zero()
        self.lifetime_produced = 0
        self.lifetime_overflow = 0
        self.stages_completed = 0
        self.last_produced_count = 0
        self.manual_clicks = 0
        self._milestones_hit.clear()
        self._last_result = None
        self._stage = 1
        self.logger.info("New game")
        self._reset_to_menu()

    # ------------------------------------------------------------------
    # Saves
    # ------------------------------------------------------------------
    def save_to_slot(self, slot: int) -> bool:
        if self.store is None or not self._phase.at_boundary:
            return self._reject("save_to_slot")
        return self.store.save(slot, self.store.snapshot(self, self.catalog))

    def load_from_slot(self, slot: int) -> bool:
        if self.store is None or not self._phase.at_boundary:
            return self._reject("load_from_slot")
        snapshot = self.store.load(slot)
        if snapshot is None:
            return False
        return self.store.restore(snapshot, self.catalog, self)

    def has_suspended_game(self) -> bool:
        return self.store is not None and self.store.exists(SUSPEND_SLOT)

    def resume_suspended(self) -> bool:
        """Restore the suspend slot; the slot is consumed on success."""

        if self.store is None or not self._phase.at_boundary:
            return self._reject("resume_suspended")
        snapshot = self.store.load(SUSPEND_SLOT)
        if snapshot is None:
            return False
        if not self.store.restore(snapshot, self.catalog, self):
            return False
        self.store.delete(SUSPEND_SLOT)
        return True

    def restore_progress(
        self,
        stage: int,
        last_produced_count: int,
        lifetime_produced: int,
        lifetime_overflow: int,
        stages_completed: int,
    ) -> None:
        """Adopt progress from a restored snapshot and return to the menu."""

        self._stage = stage
        self.last_produced_count = last_produced_count
        self.lifetime_produced = lifetime_produced
        self.lifetime_overflow = lifetime_overflow
        self.stages_completed = stages_completed
        self._last_result = None
        self._reset_to_menu()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _begin_stage(self) -> None:
        self.timers.bump_epoch()
        self._reset_stage_state()
        self._countdown_remaining = self.config.countdown_seconds
        self.logger.info("Stage %d: goal %d in %.0fs", self._stage, self._counter.goal, self.config.time_limit)
        self._set_phase(Phase.COUNTING_DOWN)
        if self._countdown_remaining <= 0.0:
            self._begin_play()

    def _begin_play(self) -> None:
        self._countdown_remaining = 0.0
        self._set_phase(Phase.PLAYING)

    def _reset_stage_state(self) -> None:
        self._counter.reset(stage_goal(self._stage))
        self._time_remaining = self.config.time_limit
        self._goal_reached = False
        self._offered = []
        self.production.reset_accumulators()
        self.boost.reset_for_stage()
        self.production.recompute(self.catalog, self.boost)
        self.events.emit(ev.PRODUCED_COUNT_CHANGED, self._counter.produced, self._counter.overflow)

    def _reset_to_menu(self) -> None:
        self.timers.cancel_all()
        self.timers.bump_epoch()
        self._countdown_remaining = 0.0
        self._reset_stage_state()
        self._set_phase(Phase.MENU)

    def _time_up(self) -> None:
        self.logger.info(
            "Time up on stage %d: %d/%d (+%d)",
            self._stage,
            self._counter.produced,
            self._counter.goal,
            self._counter.overflow,
        )
        self._set_phase(Phase.TIME_UP)
        self._enter_resolving()

    def _enter_resolving(self) -> None:
        self._set_phase(Phase.RESOLVING)
        self.timers.schedule(self.config.resolution_delay, self._resolve, "resolve")

    def _resolve(self) -> None:
        if self._phase is not Phase.RESOLVING:
            self.logger.warning("Resolution fired in %s, ignored", self._phase.name)
            return
        counter = self._counter
        cleared = counter.total >= counter.goal
        result = StageResult(
            stage=self._stage,
            goal=counter.goal,
            produced=counter.produced,
            overflow=counter.overflow,
            cleared=cleared,
            time_used=self.config.time_limit - self.remaining_time,
        )
        self._last_result = result
        self.last_produced_count = counter.total
        if cleared:
            self.lifetime_produced += counter.produced
            self.lifetime_overflow += counter.overflow
            self.stages_completed += 1
        self.logger.info("Stage %d %s", self._stage, "cleared" if cleared else "failed")
        self.events.emit(ev.STAGE_RESOLVED, result)
        if not cleared:
            self._set_phase(Phase.GAME_OVER)
        elif self._stage >= self.config.max_stage:
            self._set_phase(Phase.COMPLETE)
        else:
            self._offer_upgrades()

    def _offer_upgrades(self) -> None:
        self._offered = self.catalog.draw_choices(self._stage, self.config.choice_count)
        self._set_phase(Phase.UPGRADE_SELECTION)
        if not self._offered:
            self.logger.info("No upgrades left to offer")
            self._set_phase(Phase.STAGE_CHOICE)
            return
        self.events.emit(ev.UPGRADE_CHOICES_READY, list(self._offered))

    def _apply_outcome(self, outcome: ClickOutcome) -> None:
        self.events.emit(ev.PRODUCED_COUNT_CHANGED, self._counter.produced, self._counter.overflow)
        if outcome.crossed_goal and not self._goal_reached:
            self.mark_goal_reached()

    def _claim_goal(self) -> None:
        if self._goal_reached:
            raise StateConflictError(f"goal for stage {self._stage} already reached")
        if not self._phase.in_play:
            raise StateConflictError(f"no goal in phase {self._phase.name}")
        if self._counter.total < self._counter.goal:
            raise StateConflictError(
                f"stage {self._stage} at {self._counter.total} of {self._counter.goal}"
            )
        self._goal_reached = True

    def _count_manual_click(self) -> None:
        self.manual_clicks += 1
        count = self.manual_clicks
        if count in self.config.click_milestones and count not in self._milestones_hit:
            self._milestones_hit.add(count)
            self.logger.info("%d clicks!", count)
            self.events.emit(ev.CLICK_MILESTONE, count)

    def _on_boost_change(self, boosted: bool, multiplier: float) -> None:
        self.events.emit(ev.BOOST_STATE_CHANGED, boosted, multiplier)

    def _set_phase(self, phase: Phase) -> None:
        if phase is self._phase:
            return
        self.logger.debug("Phase %s -> %s", self._phase.name, phase.name)
        self._phase = phase
        self.events.emit(ev.PHASE_CHANGED, phase)

    def _reject(self, action: str) -> bool:
        self.logger.warning("%s ignored in phase %s", action, self._phase.name)
        return False


__all__ = ["StageController", "StageResult"]
