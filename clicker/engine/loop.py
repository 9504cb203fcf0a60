"""Fixed timestep loop that drives the stage controller."""
from __future__ import annotations

import time
from typing import Callable, Optional


class FixedTimestepLoop:
    """Feeds fixed ``dt`` ticks to ``update`` and lets ``render`` run once per frame.

    ``step`` is the unit of work and can be driven by hand in tests;
    ``run`` wraps it with the wall clock.
    """

    def __init__(
        self,
        update: Callable[[float], None],
        render: Optional[Callable[[float], None]] = None,
        process_events: Optional[Callable[[], None]] = None,
        fixed_hz: float = 60.0,
        max_frame_time: float = 0.25,
    ) -> None:
        self.update = update
        self.render = render
        self.process_events = process_events
        self.fixed_dt = 1.0 / fixed_hz
        self.max_frame_time = max_frame_time
        self._accumulator = 0.0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def stop(self) -> None:
        self._running = False

    def step(self, frame_time: float) -> int:
        """Advance by ``frame_time`` seconds and return the number of updates run."""

        if frame_time > self.max_frame_time:
            frame_time = self.max_frame_time
        self._accumulator += max(0.0, frame_time)
        if self.process_events:
            self.process_events()
        updates = 0
        # Events may stop the loop mid-frame; skip the update pass then.
        while self._running and self._accumulator >= self.fixed_dt:
            self.update(self.fixed_dt)
            self._accumulator -= self.fixed_dt
            updates += 1
        if self.render:
            alpha = self._accumulator / self.fixed_dt if self.fixed_dt > 0 else 0.0
            self.render(alpha)
        return updates

    def start(self) -> None:
        self._running = True
        self._accumulator = 0.0

    def run(self) -> None:
        self.start()
        last_time = time.perf_counter()
        while self._running:
            now = time.perf_counter()
            frame_time = now - last_time
            last_time = now
            self.step(frame_time)


__all__ = ["FixedTimestepLoop"]
