"""Delayed continuations that die with the stage that scheduled them."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List


@dataclass
class _Pending:
    remaining: float
    epoch: int
    callback: Callable[[], None]
    label: str


class DelayScheduler:
    """Runs callbacks after a delay measured in simulation time.

    Every scheduled callback remembers the epoch it was created in. Bumping
    the epoch (new stage, retry, restore) makes older callbacks stale; they
    are discarded when they come due instead of firing.
    """

    def __init__(self) -> None:
        self.epoch = 0
        self._pending: List[_Pending] = []

    def __len__(self) -> int:
        return len(self._pending)

    def schedule(self, delay: float, callback: Callable[[], None], label: str = "") -> None:
        self._pending.append(_Pending(max(0.0, delay), self.epoch, callback, label))

    def bump_epoch(self) -> int:
        self.epoch += 1
        return self.epoch

    def cancel_all(self) -> None:
        self._pending.clear()

    def pending_labels(self) -> List[str]:
        return [entry.label for entry in self._pending if entry.epoch == self.epoch]

    def advance(self, dt: float) -> int:
        """Count down by ``dt`` and run what came due; returns how many fired."""

        due: List[_Pending] = []
        waiting: List[_Pending] = []
        for entry in self._pending:
            entry.remaining -= dt
            (due if entry.remaining <= 1e-9 else waiting).append(entry)
        self._pending = waiting
        fired = 0
        for entry in due:
            if entry.epoch != self.epoch:
                continue
            entry.callback()
            fired += 1
        return fired


__all__ = ["DelayScheduler"]
