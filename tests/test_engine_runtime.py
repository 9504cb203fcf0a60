"""Event hub, delay scheduler and the fixed timestep loop."""
from __future__ import annotations

import pytest

from clicker.engine import events as ev
from clicker.engine.events import EventHub
from clicker.engine.loop import FixedTimestepLoop
from clicker.stage.timers import DelayScheduler


def test_event_hub_dispatch_order_and_unsubscribe() -> None:
    hub = EventHub()
    calls = []
    first = lambda count, overflow: calls.append(("first", count, overflow))
    hub.subscribe(ev.PRODUCED_COUNT_CHANGED, first)
    hub.subscribe(ev.PRODUCED_COUNT_CHANGED, lambda count, overflow: calls.append(("second", count, overflow)))
    hub.emit(ev.PRODUCED_COUNT_CHANGED, 3, 0)
    hub.unsubscribe(ev.PRODUCED_COUNT_CHANGED, first)
    hub.emit(ev.PRODUCED_COUNT_CHANGED, 4, 1)
    assert calls == [("first", 3, 0), ("second", 3, 0), ("second", 4, 1)]


def test_event_hub_rejects_unknown_names() -> None:
    with pytest.raises(KeyError):
        EventHub().subscribe("made_up", lambda: None)


def test_failing_listener_does_not_stop_others() -> None:
    hub = EventHub()
    seen = []

    def broken() -> None:
        raise ValueError("boom")

    hub.subscribe(ev.GOAL_REACHED, broken)
    hub.subscribe(ev.GOAL_REACHED, lambda: seen.append("ok"))
    hub.emit(ev.GOAL_REACHED)
    assert seen == ["ok"]


def test_delay_fires_once_when_due() -> None:
    timers = DelayScheduler()
    fired = []
    timers.schedule(1.0, lambda: fired.append("resolve"), "resolve")
    assert timers.advance(0.5) == 0
    assert timers.pending_labels() == ["resolve"]
    assert timers.advance(0.5) == 1
    assert timers.advance(5.0) == 0
    assert fired == ["resolve"]
    assert len(timers) == 0


def test_stale_delays_are_dropped() -> None:
    timers = DelayScheduler()
    fired = []
    timers.schedule(1.0, lambda: fired.append("old"))
    timers.bump_epoch()
    timers.schedule(1.0, lambda: fired.append("new"))
    assert timers.advance(1.0) == 1
    assert fired == ["new"]


def test_loop_runs_fixed_updates() -> None:
    updates = []
    loop = FixedTimestepLoop(updates.append, fixed_hz=10.0)
    assert loop.step(1.0) == 0
    loop.start()
    assert loop.step(0.25) == 2
    assert loop.step(0.1) == 1
    assert updates == pytest.approx([0.1, 0.1, 0.1])


def test_loop_clamps_long_frames_and_stops_from_events() -> None:
    loop: FixedTimestepLoop
    updates = []

    def process_events() -> None:
        if len(updates) >= 3:
            loop.stop()

    loop = FixedTimestepLoop(updates.append, process_events=process_events, fixed_hz=10.0, max_frame_time=0.25)
    loop.start()
    assert loop.step(5.0) == 2
    assert loop.step(0.2) == 2
    assert loop.step(0.1) == 0
    assert not loop.running
