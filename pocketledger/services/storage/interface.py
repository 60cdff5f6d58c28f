"""
Abstract Storage Interface

DESIGN DECISION: The ledger is persisted as one JSON blob in a single
key-value slot. The slot abstraction is intentionally tiny so that:
1. A file on disk and an in-memory dict are interchangeable
2. Tests never touch the user's real data directory
3. Serialization stays in one place (LedgerStore), not in every backend

Slots only move strings. They know nothing about transactions or goals.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pocketledger.errors import LedgerError


class KeyValueSlot(ABC):
    """
    Abstract persistent key-value slot.

    Any storage implementation (file, browser-style local storage,
    in-memory, ...) must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Slot key

        Returns:
            The stored string, or None if the key was never written

        Raises:
            PersistenceError: If the backend could not be read
        """
        pass

    @abstractmethod
    def write(self, key: str, data: str) -> None:
        """
        Overwrite the value stored under a key.

        A subsequent read sees either the old value or the new one,
        never a partial write.

        Raises:
            PersistenceError: If the write failed
        """
        pass


class StorageError(LedgerError):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """Loading or saving the ledger failed."""
    pass
