"""Error types shared by the stage/economy core."""
from __future__ import annotations


class ClickerError(RuntimeError):
    """Base class for core errors."""


class ValidationError(ClickerError):
    """Raised when a value is out of range or a record is malformed."""


class NotFoundError(ClickerError):
    """Raised when an upgrade kind or save slot is not known."""


class StateConflictError(ClickerError):
    """Raised when an operation does not fit the current phase."""


class PersistenceError(ClickerError):
    """Raised when a save backend fails to read or write."""


__all__ = [
    "ClickerError",
    "ValidationError",
    "NotFoundError",
    "StateConflictError",
    "PersistenceError",
]
