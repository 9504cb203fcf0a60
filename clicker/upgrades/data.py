"""Upgrade kinds and the shipped upgrade table."""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List

from clicker.economy.formulas import upgrade_effect


class UpgradeKind(IntEnum):
    """Stable identity of an upgrade. Values are part of the save format."""

    CLICK_POWER = 0
    FACTORY = 1  # legacy, superseded by DONKEY_BAKERY
    HELPER_FRIEND = 2
    DONKEY_BAKERY = 3
    RAINBOW_JAPAMAN = 4
    LUCKY_BEAST = 5
    ROBA_BAKERY = 6  # legacy, superseded by DONKEY_BAKERY
    FRIENDS_CALL = 7
    LUCKY_TAIL = 8
    MIRACLE_TIME = 9
    SATISFACTION = 10
    CHAT_SYSTEM = 11
    ORGANIZER = 12

    @classmethod
    def parse(cls, value: Any) -> "UpgradeKind":
        if isinstance(value, UpgradeKind):
            return value
        if isinstance(value, int):
            return cls(value)
        key = str(value).strip().upper()
        if key in cls.__members__:
            return cls[key]
        # camelCase names from data files, e.g. "ClickPower" / "clickPower"
        snake = "".join(f"_{c}" if c.isupper() else c for c in str(value).strip()).lstrip("_").upper()
        return cls[snake]


AUTO_PRODUCTION_KINDS = (
    UpgradeKind.FACTORY,
    UpgradeKind.DONKEY_BAKERY,
    UpgradeKind.ROBA_BAKERY,
)
CLICK_KIND = UpgradeKind.CLICK_POWER
HELPER_KIND = UpgradeKind.HELPER_FRIEND
BOOST_KIND = UpgradeKind.ORGANIZER
RARE_KIND = UpgradeKind.RAINBOW_JAPAMAN
RARE_LUCK_KIND = UpgradeKind.LUCKY_TAIL


@dataclass
class UpgradeDefinition:
    """Canonical definition of one upgrade kind plus its current level."""

    kind: UpgradeKind
    name: str
    description: str = ""
    base_effect: float = 1.0
    level_multiplier: float = 1.5
    max_level: int = 5
    required_stage: int = 1
    selection_weight: float = 1.0
    current_level: int = 0
    is_active: bool = False
    is_instant_effect: bool = False
    is_passive_effect: bool = True

    @property
    def is_maxed(self) -> bool:
        return self.current_level >= self.max_level

    def current_effect(self) -> float:
        return upgrade_effect(self.base_effect, self.level_multiplier, self.current_level, self.is_active)

    def effect_at(self, level: int) -> float:
        """Effect the upgrade would have at ``level`` once acquired."""

        return upgrade_effect(self.base_effect, self.level_multiplier, level)

    def describe(self) -> str:
        return f"{self.description}\nLv.{self.current_level} (effect: {self.current_effect():.1f})"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UpgradeDefinition":
        kind = UpgradeKind.parse(data["kind"])
        return cls(
            kind=kind,
            name=data.get("name", kind.name.replace("_", " ").title()),
            description=data.get("description", ""),
            base_effect=float(data.get("baseEffect", 1.0)),
            level_multiplier=float(data.get("levelMultiplier", 1.5)),
            max_level=int(data.get("maxLevel", 5)),
            required_stage=int(data.get("requiredStage", 1)),
            selection_weight=max(0.0, float(data.get("selectionWeight", 1.0))),
            is_instant_effect=bool(data.get("isInstantEffect", False)),
            is_passive_effect=bool(data.get("isPassiveEffect", True)),
        )


def default_definitions() -> List[UpgradeDefinition]:
    """The eleven upgrades the game ships with, in catalog order."""

    return [
        UpgradeDefinition(
            UpgradeKind.CLICK_POWER,
            "Click Power",
            "Each click puts more japaman on the plate.",
            base_effect=1.0,
            level_multiplier=2.0,
            max_level=10,
            selection_weight=3.0,
        ),
        UpgradeDefinition(
            UpgradeKind.DONKEY_BAKERY,
            "Donkey Bakery",
            "Bakes bread and tosses it onto the plate automatically.",
            base_effect=10.0,
            level_multiplier=2.5,
            max_level=8,
            selection_weight=2.5,
        ),
        UpgradeDefinition(
            UpgradeKind.HELPER_FRIEND,
            "Helper Friend",
            "Clicks for you.",
            base_effect=0.5,
            level_multiplier=1.8,
            max_level=6,
            selection_weight=2.0,
        ),
        UpgradeDefinition(
            UpgradeKind.RAINBOW_JAPAMAN,
            "Rainbow Japaman",
            "Rarely produces a japaman worth three.",
            base_effect=0.05,
            level_multiplier=1.3,
            max_level=5,
            required_stage=3,
            selection_weight=1.5,
        ),
        UpgradeDefinition(
            UpgradeKind.LUCKY_BEAST,
            "Lucky Beast",
            "A lucky beast shows up now and then; click it for a buff.",
            base_effect=0.1,
            level_multiplier=1.2,
            max_level=5,
            required_stage=2,
            selection_weight=1.8,
        ),
        UpgradeDefinition(
            UpgradeKind.FRIENDS_CALL,
            "Friends Call",
            "Doubles the lucky beast appearance rate.",
            base_effect=2.0,
            level_multiplier=1.3,
            max_level=3,
            required_stage=5,
            selection_weight=1.2,
        ),
        UpgradeDefinition(
            UpgradeKind.LUCKY_TAIL,
            "Lucky Tail",
            "Tilts every random event in your favour.",
            base_effect=1.5,
            level_multiplier=1.2,
            max_level=4,
            required_stage=6,
            selection_weight=1.0,
        ),
        UpgradeDefinition(
            UpgradeKind.MIRACLE_TIME,
            "Miracle Time",
            "Occasionally triples every effect for ten seconds.",
            base_effect=0.02,
            level_multiplier=1.5,
            max_level=3,
            required_stage=8,
            selection_weight=0.8,
        ),
        UpgradeDefinition(
            UpgradeKind.SATISFACTION,
            "Satisfaction",
            "Overfeeding lowers the next round's goal.",
            base_effect=0.1,
            level_multiplier=1.5,
            max_level=5,
            required_stage=3,
            selection_weight=1.3,
        ),
        UpgradeDefinition(
            UpgradeKind.CHAT_SYSTEM,
            "Let's Chat",
            "Friends ask questions; right answers grant a buff.",
            base_effect=1.0,
            level_multiplier=1.2,
            max_level=3,
            required_stage=7,
            selection_weight=1.0,
        ),
        UpgradeDefinition(
            UpgradeKind.ORGANIZER,
            "Organizer",
            "Leave the plate alone for a while and automation speeds up.",
            base_effect=2.0,
            level_multiplier=1.4,
            max_level=4,
            required_stage=5,
            selection_weight=1.1,
        ),
    ]


__all__ = [
    "UpgradeKind",
    "UpgradeDefinition",
    "default_definitions",
    "AUTO_PRODUCTION_KINDS",
    "CLICK_KIND",
    "HELPER_KIND",
    "BOOST_KIND",
    "RARE_KIND",
    "RARE_LUCK_KIND",
]
