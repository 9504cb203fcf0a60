"""Canonical upgrade catalog: levels, effects and between-stage offers."""
from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from clicker.engine.logger import ChannelLogger, null_channel
from clicker.errors import NotFoundError
from clicker.upgrades.data import UpgradeDefinition, UpgradeKind, default_definitions
from clicker.upgrades.draw import sample_without_replacement


class UpgradeCatalog:
    """Owns one :class:`UpgradeDefinition` per kind.

    The catalog is the only store of upgrade levels. What the player holds
    is derived with :meth:`acquired_view`, so there is no second collection
    to keep in step with this one.
    """

    def __init__(
        self,
        definitions: Iterable[UpgradeDefinition],
        rng: Optional[random.Random] = None,
        logger: Optional[ChannelLogger] = None,
    ) -> None:
        self._definitions: List[UpgradeDefinition] = []
        self._by_kind: Dict[UpgradeKind, UpgradeDefinition] = {}
        for definition in definitions:
            if definition.kind in self._by_kind:
                raise ValueError(f"Duplicate upgrade kind {definition.kind.name}")
            self._definitions.append(definition)
            self._by_kind[definition.kind] = definition
        self.rng = rng or random.Random()
        self.logger = logger or null_channel("upgrades")

    @classmethod
    def default(cls, rng: Optional[random.Random] = None, logger: Optional[ChannelLogger] = None) -> "UpgradeCatalog":
        return cls(default_definitions(), rng=rng, logger=logger)

    @classmethod
    def load(
        cls,
        path: Path,
        rng: Optional[random.Random] = None,
        logger: Optional[ChannelLogger] = None,
    ) -> "UpgradeCatalog":
        """Build a catalog from a JSON list; falls back to the shipped table."""

        if not path.exists():
            return cls.default(rng=rng, logger=logger)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return cls.default(rng=rng, logger=logger)
        if isinstance(data, dict):
            data = data.get("upgrades", [])
        if not isinstance(data, list):
            return cls.default(rng=rng, logger=logger)
        definitions: List[UpgradeDefinition] = []
        seen = set()
        for entry in data:
            try:
                definition = UpgradeDefinition.from_dict(entry)
            except (KeyError, TypeError, ValueError):
                continue
            if definition.kind in seen:
                continue
            seen.add(definition.kind)
            definitions.append(definition)
        if not definitions:
            return cls.default(rng=rng, logger=logger)
        return cls(definitions, rng=rng, logger=logger)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[UpgradeDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, kind: object) -> bool:
        return kind in self._by_kind

    def kinds(self) -> List[UpgradeKind]:
        return [definition.kind for definition in self._definitions]

    def get(self, kind: UpgradeKind) -> UpgradeDefinition:
        try:
            return self._by_kind[kind]
        except KeyError:
            raise NotFoundError(f"Upgrade {kind!r} is not in the catalog") from None

    def level_of(self, kind: UpgradeKind) -> int:
        try:
            return self.get(kind).current_level
        except NotFoundError:
            return 0

    def current_effect(self, kind: UpgradeKind) -> float:
        try:
            return self.get(kind).current_effect()
        except NotFoundError:
            return 0.0

    def acquired_view(self) -> List[UpgradeDefinition]:
        return [
            definition
            for definition in self._definitions
            if definition.current_level > 0 and definition.is_active
        ]

    # ------------------------------------------------------------------
    # Offers
    # ------------------------------------------------------------------
    def eligible(self, stage: int) -> List[UpgradeDefinition]:
        return [
            definition
            for definition in self._definitions
            if definition.required_stage <= stage and definition.current_level < definition.max_level
        ]

    def draw_choices(
        self,
        stage: int,
        count: int,
        rng: Optional[random.Random] = None,
    ) -> List[UpgradeDefinition]:
        if count <= 0:
            return []
        pool = self.eligible(stage)
        choices = sample_without_replacement(pool, count, lambda d: d.selection_weight, rng or self.rng)
        self.logger.debug(
            "Stage %d offers %s (pool %d)",
            stage,
            [choice.kind.name for choice in choices],
            len(pool),
        )
        return choices

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def acquire(self, kind: UpgradeKind) -> bool:
        try:
            definition = self.get(kind)
        except NotFoundError:
            self.logger.warning("Cannot acquire %s: not in catalog", getattr(kind, "name", kind))
            return False
        if definition.current_level <= 0:
            definition.current_level = 1
            definition.is_active = True
        elif definition.current_level >= definition.max_level:
            self.logger.info("%s already at max level %d", definition.name, definition.max_level)
            return False
        else:
            definition.current_level += 1
            definition.is_active = True
        self.logger.info("Acquired %s -> Lv.%d", definition.name, definition.current_level)
        return True

    def reset_all_to_zero(self) -> None:
        for definition in self._definitions:
            definition.current_level = 0
            definition.is_active = False

    def clear_instant_effects_for_new_stage(self) -> List[UpgradeKind]:
        cleared: List[UpgradeKind] = []
        for definition in self._definitions:
            if not definition.is_instant_effect:
                continue
            if definition.current_level or definition.is_active:
                cleared.append(definition.kind)
            definition.current_level = 0
            definition.is_active = False
        return cleared

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    def levels(self) -> Tuple[List[int], List[bool]]:
        return (
            [definition.current_level for definition in self._definitions],
            [definition.is_active for definition in self._definitions],
        )

    def apply_levels(self, levels: Sequence[int], active: Sequence[bool]) -> None:
        """Overwrite every entry from index-aligned arrays.

        Entries past the end of either array are cleared, and an entry only
        counts as held when it has a level and is active. Levels must already
        be clamped by the caller.
        """

        for index, definition in enumerate(self._definitions):
            held = index < len(levels) and index < len(active) and int(levels[index]) > 0 and bool(active[index])
            definition.current_level = int(levels[index]) if held else 0
            definition.is_active = held


__all__ = ["UpgradeCatalog"]
