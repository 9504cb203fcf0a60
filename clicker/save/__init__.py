"""Save slots, the suspend slot and snapshot restore."""

from .backend import FileBackend, MemoryBackend, PersistenceBackend
from .snapshot import SNAPSHOT_VERSION, SaveSnapshot
from .store import DEFAULT_MAX_SLOTS, SUSPEND_SLOT, PersistenceStore

__all__ = [
    "FileBackend",
    "MemoryBackend",
    "PersistenceBackend",
    "SaveSnapshot",
    "SNAPSHOT_VERSION",
    "PersistenceStore",
    "SUSPEND_SLOT",
    "DEFAULT_MAX_SLOTS",
]
