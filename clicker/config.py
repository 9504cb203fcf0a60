"""Runtime configuration read from settings.json."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

SETTINGS_PATH = Path("settings.json")

DEFAULT_MILESTONES = (100, 500, 1000, 2000)


def read_settings(path: Path) -> Dict[str, Any]:
    """Parse settings.json; a missing, broken or non-object file reads as empty."""

    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


@dataclass(frozen=True)
class GameConfig:
    """Tunables for a play session.

    Defaults match the shipped game: a 30 second round, a 4 second
    "3, 2, 1, start" lead-in and a one second settle window before a
    time-up is resolved.
    """

    time_limit: float = 30.0
    countdown_seconds: float = 4.0
    resolution_delay: float = 1.0
    max_stage: int = 30
    choice_count: int = 3
    boost_multiplier: float = 1.5
    end_stage_on_goal: bool = False
    save_directory: Path = Path("saves")
    max_save_slots: int = 20
    sim_hz: float = 60.0
    upgrade_data: Optional[Path] = None
    click_milestones: Tuple[int, ...] = field(default=DEFAULT_MILESTONES)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameConfig":
        upgrade_data = data.get("upgradeData")
        return cls(
            time_limit=max(1.0, float(data.get("timeLimit", 30.0))),
            countdown_seconds=max(0.0, float(data.get("countdownSeconds", 4.0))),
            resolution_delay=max(0.0, float(data.get("resolutionDelay", 1.0))),
            max_stage=max(1, int(data.get("maxStage", 30))),
            choice_count=max(0, int(data.get("choiceCount", 3))),
            boost_multiplier=max(1.0, float(data.get("boostMultiplier", 1.5))),
            end_stage_on_goal=bool(data.get("endStageOnGoal", False)),
            save_directory=Path(data.get("saveDirectory", "saves")),
            max_save_slots=max(1, int(data.get("maxSaveSlots", 20))),
            sim_hz=max(1.0, float(data.get("simHz", 60))),
            upgrade_data=Path(upgrade_data) if upgrade_data else None,
            click_milestones=tuple(int(v) for v in data.get("clickMilestones", DEFAULT_MILESTONES)),
        )

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "GameConfig":
        data = read_settings(path or SETTINGS_PATH)
        try:
            return cls.from_dict(data)
        except (TypeError, ValueError):
            return cls()


__all__ = ["GameConfig", "read_settings", "SETTINGS_PATH", "DEFAULT_MILESTONES"]
