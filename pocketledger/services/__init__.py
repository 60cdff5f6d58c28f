"""Services package."""

from pocketledger.services.storage import (
    DEFAULT_SLOT_KEY,
    FileSlot,
    KeyValueSlot,
    LedgerStore,
    MemorySlot,
    PersistenceError,
    StorageError,
)

__all__ = [
    "DEFAULT_SLOT_KEY",
    "FileSlot",
    "KeyValueSlot",
    "LedgerStore",
    "MemorySlot",
    "PersistenceError",
    "StorageError",
]
