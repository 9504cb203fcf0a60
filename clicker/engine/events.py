"""Named event hub the presentation layer subscribes to."""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from clicker.engine.logger import ChannelLogger

PHASE_CHANGED = "phase_changed"
PRODUCED_COUNT_CHANGED = "produced_count_changed"
GOAL_REACHED = "goal_reached"
UPGRADE_CHOICES_READY = "upgrade_choices_ready"
UPGRADE_ACQUIRED = "upgrade_acquired"
BOOST_STATE_CHANGED = "boost_state_changed"
STAGE_RESOLVED = "stage_resolved"
CLICK_MILESTONE = "click_milestone"

EVENT_NAMES = (
    PHASE_CHANGED,
    PRODUCED_COUNT_CHANGED,
    GOAL_REACHED,
    UPGRADE_CHOICES_READY,
    UPGRADE_ACQUIRED,
    BOOST_STATE_CHANGED,
    STAGE_RESOLVED,
    CLICK_MILESTONE,
)

Listener = Callable[..., None]


class EventHub:
    """Dispatches core events to subscribers in subscription order."""

    def __init__(self, logger: Optional[ChannelLogger] = None) -> None:
        self._listeners: Dict[str, List[Listener]] = {name: [] for name in EVENT_NAMES}
        self._logger = logger

    def subscribe(self, name: str, listener: Listener) -> None:
        if name not in self._listeners:
            raise KeyError(f"Unknown event '{name}'")
        self._listeners[name].append(listener)

    def unsubscribe(self, name: str, listener: Listener) -> None:
        listeners = self._listeners.get(name, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, name: str, *args) -> None:
        for listener in list(self._listeners.get(name, [])):
            try:
                listener(*args)
            except Exception:
                if self._logger:
                    self._logger.error("Listener for '%s' failed", name, exc_info=True)


__all__ = [
    "EventHub",
    "EVENT_NAMES",
    "PHASE_CHANGED",
    "PRODUCED_COUNT_CHANGED",
    "GOAL_REACHED",
    "UPGRADE_CHOICES_READY",
    "UPGRADE_ACQUIRED",
    "BOOST_STATE_CHANGED",
    "STAGE_RESOLVED",
    "CLICK_MILESTONE",
]
