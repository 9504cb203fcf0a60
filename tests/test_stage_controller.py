"""Stage controller scenarios driven through its public inputs."""
from __future__ import annotations

import logging
import random

import pytest

from clicker.config import GameConfig
from clicker.engine import events as ev
from clicker.engine.clock import ManualClock
from clicker.save import SUSPEND_SLOT
from clicker.stage.controller import StageController
from clicker.stage.phases import Phase
from clicker.upgrades.catalog import UpgradeCatalog
from clicker.upgrades.data import UpgradeDefinition, UpgradeKind


def _controller(**overrides) -> StageController:
    options = {"countdown_seconds": 0.0}
    options.update(overrides)
    return StageController.from_config(GameConfig(**options), rng=random.Random(5), clock=ManualClock())


def _record(controller: StageController, *names: str) -> list:
    log = []
    for name in names:
        controller.events.subscribe(name, lambda *args, _name=name: log.append((_name, args)))
    return log


def _tick(controller: StageController, seconds: float, dt: float = 0.5) -> None:
    for _ in range(int(round(seconds / dt))):
        controller.on_frame_tick(dt)


def _clear_stage(controller: StageController) -> None:
    while controller.produced < controller.stage_goal:
        assert controller.on_manual_click()
    _tick(controller, controller.remaining_time + controller.config.resolution_delay)


def test_countdown_blocks_input() -> None:
    controller = _controller(countdown_seconds=4.0)
    assert controller.start()
    assert controller.phase is Phase.COUNTING_DOWN
    assert not controller.on_manual_click()
    _tick(controller, 3.0)
    assert controller.phase is Phase.COUNTING_DOWN
    assert controller.countdown_remaining == pytest.approx(1.0)
    assert controller.remaining_time == pytest.approx(30.0)
    _tick(controller, 1.0)
    assert controller.phase is Phase.PLAYING
    assert controller.on_manual_click()
    assert controller.produced == 1
    assert not controller.start()


def test_fifty_clicks_reach_goal_once() -> None:
    controller = _controller()
    log = _record(controller, ev.GOAL_REACHED)
    controller.start()
    for _ in range(50):
        controller.on_manual_click()
    assert controller.phase is Phase.GOAL_REACHED
    assert controller.produced == 50
    assert controller.overflow == 0
    assert controller.on_manual_click()
    assert controller.overflow == 1
    assert log == [(ev.GOAL_REACHED, ())]
    assert not controller.mark_goal_reached()


def test_goal_cannot_be_claimed_below_target() -> None:
    controller = _controller(end_stage_on_goal=True)
    controller.start()
    controller.on_manual_click()
    assert not controller.mark_goal_reached()
    assert not controller.goal_reached
    assert controller.phase is Phase.PLAYING
    controller.on_frame_tick(1.0)
    assert controller.phase is Phase.PLAYING
    assert controller.last_result is None


def test_duplicate_goal_is_logged_not_raised(caplog) -> None:
    controller = _controller()
    controller.logger.enabled = True
    controller.start()
    for _ in range(50):
        controller.on_manual_click()
    with caplog.at_level(logging.WARNING, logger="clicker.stage"):
        assert not controller.mark_goal_reached()
    assert "already reached" in caplog.text
    assert controller.phase is Phase.GOAL_REACHED


def test_play_continues_after_goal_until_time_up() -> None:
    controller = _controller()
    controller.start()
    for _ in range(60):
        controller.on_manual_click()
    _tick(controller, 29.5)
    assert controller.phase is Phase.GOAL_REACHED
    assert controller.on_manual_click()
    _tick(controller, 0.5)
    assert controller.phase is Phase.RESOLVING
    assert not controller.on_manual_click()
    assert controller.overflow == 11


def test_cleared_stage_offers_upgrades_and_advances() -> None:
    controller = _controller()
    log = _record(controller, ev.PHASE_CHANGED, ev.UPGRADE_CHOICES_READY, ev.STAGE_RESOLVED, ev.UPGRADE_ACQUIRED)
    controller.start()
    _clear_stage(controller)

    phases = [args[0] for name, args in log if name == ev.PHASE_CHANGED]
    assert phases[-4:] == [Phase.GOAL_REACHED, Phase.TIME_UP, Phase.RESOLVING, Phase.UPGRADE_SELECTION]
    assert controller.phase is Phase.UPGRADE_SELECTION
    offered = {choice.kind for choice in controller.offered_choices}
    assert offered == {UpgradeKind.CLICK_POWER, UpgradeKind.DONKEY_BAKERY, UpgradeKind.HELPER_FRIEND}
    result = controller.last_result
    assert result.cleared
    assert result.time_used == pytest.approx(30.0)
    assert (controller.lifetime_produced, controller.stages_completed) == (50, 1)
    assert any(name == ev.UPGRADE_CHOICES_READY for name, _ in log)
    assert any(name == ev.STAGE_RESOLVED and args[0] is result for name, args in log)

    assert not controller.choose_upgrade(UpgradeKind.ORGANIZER)
    assert controller.choose_upgrade(UpgradeKind.CLICK_POWER)
    assert (ev.UPGRADE_ACQUIRED, (UpgradeKind.CLICK_POWER, 1)) in log
    assert controller.phase is Phase.STAGE_CHOICE
    assert controller.production_state.click_multiplier == 2

    assert controller.continue_to_next_stage()
    assert not controller.continue_to_next_stage()
    assert controller.current_stage == 2
    assert controller.stage_goal == 75
    assert controller.phase is Phase.PLAYING
    assert controller.produced == 0
    assert controller.remaining_time == pytest.approx(30.0)


def test_skip_upgrade_changes_nothing() -> None:
    controller = _controller()
    controller.start()
    _clear_stage(controller)
    assert controller.skip_upgrade()
    assert controller.phase is Phase.STAGE_CHOICE
    assert controller.catalog.acquired_view() == []
    assert not controller.skip_upgrade()


def test_failure_is_game_over_and_retry_keeps_upgrades() -> None:
    controller = _controller()
    controller.catalog.acquire(UpgradeKind.CLICK_POWER)
    controller.start()
    _tick(controller, 31.0)
    assert controller.phase is Phase.GAME_OVER
    assert not controller.last_result.cleared
    assert controller.stages_completed == 0
    assert controller.retry()
    assert controller.phase is Phase.MENU
    assert controller.current_stage == 1
    assert controller.catalog.level_of(UpgradeKind.CLICK_POWER) == 1
    assert not controller.retry()


def test_end_stage_on_goal_resolves_early() -> None:
    controller = _controller(end_stage_on_goal=True)
    controller.start()
    for _ in range(50):
        controller.on_manual_click()
    assert controller.phase is Phase.RESOLVING
    assert not controller.on_manual_click()
    _tick(controller, 1.0)
    assert controller.phase is Phase.UPGRADE_SELECTION
    assert controller.last_result.time_used == pytest.approx(0.0)


def test_last_stage_completes_the_game() -> None:
    controller = _controller(max_stage=1)
    controller.start()
    _clear_stage(controller)
    assert controller.phase is Phase.COMPLETE
    assert controller.offered_choices == []


def test_instant_upgrades_cleared_between_stages() -> None:
    catalog = UpgradeCatalog(
        [
            UpgradeDefinition(UpgradeKind.CLICK_POWER, "Click Power", level_multiplier=2.0),
            UpgradeDefinition(
                UpgradeKind.LUCKY_BEAST,
                "Lucky Beast",
                is_instant_effect=True,
                is_passive_effect=False,
            ),
        ],
        rng=random.Random(2),
    )
    catalog.acquire(UpgradeKind.CLICK_POWER)
    catalog.acquire(UpgradeKind.LUCKY_BEAST)
    controller = StageController(catalog, config=GameConfig(countdown_seconds=0.0))
    controller.start()
    _clear_stage(controller)
    controller.skip_upgrade()
    controller.continue_to_next_stage()
    assert catalog.level_of(UpgradeKind.LUCKY_BEAST) == 0
    assert catalog.level_of(UpgradeKind.CLICK_POWER) == 1


def test_idle_boost_engages_and_manual_click_cancels() -> None:
    controller = _controller()
    controller.catalog.acquire(UpgradeKind.ORGANIZER)
    controller.catalog.acquire(UpgradeKind.DONKEY_BAKERY)
    log = _record(controller, ev.BOOST_STATE_CHANGED)
    controller.start()
    _tick(controller, 9.5)
    assert not controller.boost.is_boosted
    _tick(controller, 0.5)
    assert controller.boost.is_boosted
    assert controller.production_state.temporary_boost_multiplier == pytest.approx(1.5)
    controller.on_manual_click()
    assert not controller.boost.is_boosted
    assert controller.boost.idle_seconds == 0.0
    assert controller.production_state.temporary_boost_multiplier == 1.0
    assert log == [(ev.BOOST_STATE_CHANGED, (True, 1.5)), (ev.BOOST_STATE_CHANGED, (False, 1.0))]


def test_boost_applies_on_the_tick_it_engages() -> None:
    controller = _controller()
    controller.catalog.acquire(UpgradeKind.ORGANIZER)
    controller.catalog.acquire(UpgradeKind.DONKEY_BAKERY)
    controller.start()
    _tick(controller, 9.5)
    before = controller.produced + controller.overflow
    assert before == 237
    assert not controller.boost.is_boosted
    controller.on_frame_tick(0.5)
    assert controller.boost.is_boosted
    # 0.5 carried + 25/s * 1.5 * 0.5s
    assert controller.produced + controller.overflow - before == 19


def test_auto_clicks_produce_without_touching_idle() -> None:
    controller = _controller()
    controller.catalog.acquire(UpgradeKind.HELPER_FRIEND)
    controller.catalog.acquire(UpgradeKind.ORGANIZER)
    controller.start()
    _tick(controller, 5.0)
    assert controller.produced == 4
    assert controller.manual_clicks == 0
    assert controller.boost.idle_seconds == pytest.approx(5.0)


def test_click_milestones_fire_once() -> None:
    controller = _controller(click_milestones=(3, 5))
    log = _record(controller, ev.CLICK_MILESTONE)
    controller.start()
    for _ in range(7):
        controller.on_manual_click()
    assert log == [(ev.CLICK_MILESTONE, (3,)), (ev.CLICK_MILESTONE, (5,))]


def test_suspend_then_resume_in_a_fresh_session() -> None:
    controller = _controller()
    controller.start()
    _clear_stage(controller)
    controller.choose_upgrade(UpgradeKind.CLICK_POWER)
    assert controller.suspend()
    assert controller.phase is Phase.SUSPENDED
    assert controller.store.exists(SUSPEND_SLOT)
    assert controller.store.load(SUSPEND_SLOT).stage == 2

    fresh = StageController.from_config(controller.config, backend=controller.store.backend)
    assert fresh.has_suspended_game()
    assert fresh.resume_suspended()
    assert fresh.phase is Phase.MENU
    assert fresh.current_stage == 2
    assert fresh.stage_goal == 75
    assert fresh.catalog.level_of(UpgradeKind.CLICK_POWER) == 1
    assert fresh.production_state.click_multiplier == 2
    assert (fresh.lifetime_produced, fresh.stages_completed) == (50, 1)
    assert not fresh.store.exists(SUSPEND_SLOT)
    assert not fresh.resume_suspended()


def test_suspend_failure_stays_on_stage_choice() -> None:
    controller = _controller()
    controller.start()
    _clear_stage(controller)
    controller.skip_upgrade()
    controller.store.backend.fail_writes = True
    assert not controller.suspend()
    assert controller.phase is Phase.STAGE_CHOICE
    assert controller.continue_to_next_stage()


def test_pending_resolution_dropped_after_new_game() -> None:
    controller = _controller()
    log = _record(controller, ev.STAGE_RESOLVED)
    controller.start()
    for _ in range(50):
        controller.on_manual_click()
    _tick(controller, 30.0)
    assert controller.phase is Phase.RESOLVING
    controller.new_game()
    _tick(controller, 2.0)
    assert controller.phase is Phase.MENU
    assert log == []
    assert controller.lifetime_produced == 0


def test_slot_saves_only_at_stage_boundaries() -> None:
    controller = _controller()
    controller.start()
    assert not controller.save_to_slot(0)
    _tick(controller, 31.0)
    assert controller.phase is Phase.GAME_OVER
    assert controller.save_to_slot(0)
    controller.new_game()
    assert controller.load_from_slot(0)
    assert controller.phase is Phase.MENU
    assert not controller.load_from_slot(1)


def test_new_game_resets_catalog_and_stats() -> None:
    controller = _controller()
    controller.start()
    _clear_stage(controller)
    controller.choose_upgrade(UpgradeKind.DONKEY_BAKERY)
    controller.continue_to_next_stage()
    controller.new_game()
    assert controller.phase is Phase.MENU
    assert controller.current_stage == 1
    assert controller.catalog.acquired_view() == []
    assert controller.lifetime_produced == 0
    assert controller.stages_completed == 0
    assert controller.production_state.auto_production_rate == 0.0


def test_failing_listener_does_not_break_clicks() -> None:
    controller = _controller()

    def explode(*args) -> None:
        raise RuntimeError("listener failure")

    controller.events.subscribe(ev.PRODUCED_COUNT_CHANGED, explode)
    controller.start()
    assert controller.on_manual_click()
    assert controller.produced == 1
