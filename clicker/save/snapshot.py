"""Save record and its JSON encoding."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from clicker.errors import PersistenceError, ValidationError

SNAPSHOT_VERSION = 2


@dataclass
class SaveSnapshot:
    """Everything needed to rebuild a session at a stage boundary.

    ``upgrade_levels`` and ``upgrade_active`` are index-aligned with the
    catalog order at the time of saving. Records written by older builds
    may carry shorter arrays.
    """

    stage: int = 1
    last_produced_count: int = 0
    lifetime_produced: int = 0
    lifetime_overflow: int = 0
    stages_completed: int = 0
    upgrade_levels: List[int] = field(default_factory=list)
    upgrade_active: List[bool] = field(default_factory=list)
    saved_at: Optional[datetime] = None
    version: int = SNAPSHOT_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "stage": self.stage,
            "lastProducedCount": self.last_produced_count,
            "lifetimeProduced": self.lifetime_produced,
            "lifetimeOverflow": self.lifetime_overflow,
            "stagesCompleted": self.stages_completed,
            "upgradeLevels": list(self.upgrade_levels),
            "upgradeActive": list(self.upgrade_active),
            "savedAt": self.saved_at.isoformat() if self.saved_at else None,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "SaveSnapshot":
        if not isinstance(data, dict):
            raise ValidationError("Save record must be a JSON object")
        try:
            levels = [_level(value) for value in _array(data, "upgradeLevels")]
            active = [_flag(value) for value in _array(data, "upgradeActive")]
            snapshot = cls(
                stage=int(data.get("stage", 1)),
                last_produced_count=int(data.get("lastProducedCount", 0)),
                lifetime_produced=int(data.get("lifetimeProduced", 0)),
                lifetime_overflow=int(data.get("lifetimeOverflow", 0)),
                stages_completed=int(data.get("stagesCompleted", 0)),
                upgrade_levels=levels,
                upgrade_active=active,
                saved_at=_parse_time(data.get("savedAt")),
                version=int(data.get("version", 1)),
            )
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Malformed save record: {exc}") from exc
        return snapshot

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), indent=2).encode("utf-8")

    @classmethod
    def from_bytes(cls, raw: bytes) -> "SaveSnapshot":
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Unreadable save data: {exc}") from exc
        return cls.from_dict(data)


def _array(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValidationError(f"{key} must be a list, got {type(value).__name__}")
    return value


def _level(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Upgrade level must be an integer, got {value!r}")
    return value


def _flag(value: Any) -> bool:
    # Older records stored flags as 0/1.
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValidationError(f"Upgrade flag must be a boolean, got {value!r}")


def _parse_time(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


__all__ = ["SaveSnapshot", "SNAPSHOT_VERSION"]
