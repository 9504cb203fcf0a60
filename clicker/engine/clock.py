"""Time sources for the core."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol


class NowProvider(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock used by the running game."""

    def now(self) -> datetime:
        return datetime.now()


@dataclass
class ManualClock:
    """Clock that only moves when told to."""

    current: datetime = field(default_factory=lambda: datetime(2024, 1, 1, 12, 0, 0))

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current


__all__ = ["NowProvider", "SystemClock", "ManualClock"]
