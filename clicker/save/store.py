"""Slot-based save/load and restore of a session."""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

from clicker.engine.clock import NowProvider, SystemClock
from clicker.engine.logger import ChannelLogger, null_channel
from clicker.errors import PersistenceError, ValidationError
from clicker.save.backend import PersistenceBackend
from clicker.save.snapshot import SaveSnapshot
from clicker.upgrades.catalog import UpgradeCatalog

if TYPE_CHECKING:
    from clicker.stage.controller import StageController

SUSPEND_SLOT = 999
DEFAULT_MAX_SLOTS = 20


class PersistenceStore:
    """Reads and writes :class:`SaveSnapshot` records through a backend.

    Failures never escape: backends and decoders raise ``PersistenceError``
    or ``ValidationError`` internally and the store reports them as ``False``
    or ``None`` after logging.
    """

    def __init__(
        self,
        backend: PersistenceBackend,
        clock: Optional[NowProvider] = None,
        max_slots: int = DEFAULT_MAX_SLOTS,
        logger: Optional[ChannelLogger] = None,
    ) -> None:
        self.backend = backend
        self.clock = clock or SystemClock()
        self.max_slots = max(1, max_slots)
        self.logger = logger or null_channel("save")

    def is_valid_slot(self, slot: int) -> bool:
        return slot == SUSPEND_SLOT or 0 <= slot < self.max_slots

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def snapshot(
        self,
        controller: "StageController",
        catalog: UpgradeCatalog,
        stage: Optional[int] = None,
    ) -> SaveSnapshot:
        levels, active = catalog.levels()
        return SaveSnapshot(
            stage=controller.resume_stage if stage is None else stage,
            last_produced_count=controller.produced + controller.overflow,
            lifetime_produced=controller.lifetime_produced,
            lifetime_overflow=controller.lifetime_overflow,
            stages_completed=controller.stages_completed,
            upgrade_levels=levels,
            upgrade_active=active,
            saved_at=self.clock.now(),
        )

    def restore(
        self,
        snapshot: SaveSnapshot,
        catalog: UpgradeCatalog,
        controller: "StageController",
    ) -> bool:
        """Write ``snapshot`` into the catalog and controller.

        Everything is validated and clamped before the first write, so a
        record that cannot be applied leaves the live session untouched.
        """

        try:
            levels, active = self._clamped_levels(snapshot, catalog)
            stage = self._clamped(
                "stage", snapshot.stage, 1, controller.config.max_stage
            )
            lifetime_produced = self._clamped("lifetimeProduced", snapshot.lifetime_produced, 0)
            lifetime_overflow = self._clamped("lifetimeOverflow", snapshot.lifetime_overflow, 0)
            stages_completed = self._clamped("stagesCompleted", snapshot.stages_completed, 0)
            last_count = self._clamped("lastProducedCount", snapshot.last_produced_count, 0)
        except (TypeError, ValueError) as exc:
            self.logger.error("Snapshot rejected: %s", exc)
            return False
        if len(snapshot.upgrade_levels) != len(catalog):
            self.logger.info(
                "Snapshot holds %d upgrade entries, catalog has %d",
                len(snapshot.upgrade_levels),
                len(catalog),
            )
        catalog.apply_levels(levels, active)
        controller.restore_progress(
            stage=stage,
            last_produced_count=last_count,
            lifetime_produced=lifetime_produced,
            lifetime_overflow=lifetime_overflow,
            stages_completed=stages_completed,
        )
        self.logger.info("Restored stage %d with %d upgrades held", stage, len(catalog.acquired_view()))
        return True

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    def save(self, slot: int, snapshot: SaveSnapshot) -> bool:
        if not self.is_valid_slot(slot):
            self.logger.warning("Refusing to save to invalid slot %d", slot)
            return False
        try:
            ok = self.backend.write(slot, snapshot.to_bytes())
        except PersistenceError as exc:
            self.logger.error("Save to slot %d failed: %s", slot, exc)
            return False
        if ok:
            self.logger.info("Saved stage %d to slot %d", snapshot.stage, slot)
        return ok

    def load(self, slot: int) -> Optional[SaveSnapshot]:
        if not self.is_valid_slot(slot):
            self.logger.warning("Refusing to load invalid slot %d", slot)
            return None
        try:
            raw = self.backend.read(slot)
            if raw is None:
                return None
            return SaveSnapshot.from_bytes(raw)
        except (PersistenceError, ValidationError) as exc:
            self.logger.error("Load from slot %d failed: %s", slot, exc)
            return None

    def delete(self, slot: int) -> bool:
        try:
            return self.backend.delete(slot)
        except PersistenceError as exc:
            self.logger.error("Delete of slot %d failed: %s", slot, exc)
            return False

    def exists(self, slot: int) -> bool:
        return self.is_valid_slot(slot) and self.backend.exists(slot)

    def list_slots(self) -> Dict[int, SaveSnapshot]:
        found: Dict[int, SaveSnapshot] = {}
        for slot in range(self.max_slots):
            if not self.backend.exists(slot):
                continue
            snapshot = self.load(slot)
            if snapshot is not None:
                found[slot] = snapshot
        return found

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def _clamped_levels(self, snapshot: SaveSnapshot, catalog: UpgradeCatalog) -> tuple[List[int], List[bool]]:
        levels: List[int] = []
        active: List[bool] = []
        for index, definition in enumerate(catalog):
            if index >= len(snapshot.upgrade_levels) or index >= len(snapshot.upgrade_active):
                break
            levels.append(
                self._clamped(definition.name, snapshot.upgrade_levels[index], 0, definition.max_level)
            )
            active.append(bool(snapshot.upgrade_active[index]))
        return levels, active

    def _clamped(self, label: str, value: int, low: int, high: Optional[int] = None) -> int:
        value = int(value)
        clamped = max(low, value)
        if high is not None:
            clamped = min(high, clamped)
        if clamped != value:
            self.logger.warning("%s %d out of range, clamped to %d", label, value, clamped)
        return clamped


__all__ = ["PersistenceStore", "SUSPEND_SLOT", "DEFAULT_MAX_SLOTS"]
