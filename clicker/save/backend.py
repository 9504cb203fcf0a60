"""Byte stores the save system writes through."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Protocol

from clicker.errors import PersistenceError


class PersistenceBackend(Protocol):
    def write(self, slot: int, data: bytes) -> bool:
        ...

    def read(self, slot: int) -> Optional[bytes]:
        ...

    def exists(self, slot: int) -> bool:
        ...

    def delete(self, slot: int) -> bool:
        ...


def slot_filename(slot: int) -> str:
    return f"save_{slot:02d}.json"


class FileBackend:
    """One JSON file per slot inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, slot: int) -> Path:
        return self.directory / slot_filename(slot)

    def write(self, slot: int, data: bytes) -> bool:
        path = self.path_for(slot)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Could not write {path}: {exc}") from exc
        return True

    def read(self, slot: int) -> Optional[bytes]:
        path = self.path_for(slot)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise PersistenceError(f"Could not read {path}: {exc}") from exc

    def exists(self, slot: int) -> bool:
        return self.path_for(slot).exists()

    def delete(self, slot: int) -> bool:
        path = self.path_for(slot)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as exc:
            raise PersistenceError(f"Could not delete {path}: {exc}") from exc
        return True


class MemoryBackend:
    """In-process store used by tests and headless runs."""

    def __init__(self) -> None:
        self.blobs: Dict[int, bytes] = {}
        self.fail_writes = False

    def write(self, slot: int, data: bytes) -> bool:
        if self.fail_writes:
            raise PersistenceError(f"Write to slot {slot} refused")
        self.blobs[slot] = bytes(data)
        return True

    def read(self, slot: int) -> Optional[bytes]:
        return self.blobs.get(slot)

    def exists(self, slot: int) -> bool:
        return slot in self.blobs

    def delete(self, slot: int) -> bool:
        return self.blobs.pop(slot, None) is not None


__all__ = ["PersistenceBackend", "FileBackend", "MemoryBackend", "slot_filename"]
