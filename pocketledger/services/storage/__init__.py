"""
Storage Services Package

Provides the key-value slot interface, its file and in-memory
implementations, and the LedgerStore that serializes snapshots into a slot.
"""

from pocketledger.services.storage.interface import (
    KeyValueSlot,
    PersistenceError,
    StorageError,
)
from pocketledger.services.storage.slots import FileSlot, MemorySlot
from pocketledger.services.storage.store import DEFAULT_SLOT_KEY, LedgerStore

__all__ = [
    # Interfaces
    "KeyValueSlot",
    # Exceptions
    "PersistenceError",
    "StorageError",
    # Implementations
    "DEFAULT_SLOT_KEY",
    "FileSlot",
    "LedgerStore",
    "MemorySlot",
]
