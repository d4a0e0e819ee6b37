"""
Abstract Key-Value Storage Interface

DESIGN DECISION: The report history lives in a single named slot of a
key-value store, the same shape as browser local storage.
This allows us to:
1. Keep history in a JSON file for a desktop or CLI front end
2. Use in-memory storage for testing
3. Swap in any other slot store without touching the report engine

The interface is intentionally tiny: read a slot, overwrite a slot,
remove a slot. Values are opaque strings; serialization belongs to
the caller.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for slot storage.

    Writes are synchronous and overwrite the whole slot.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a slot.

        Args:
            key: Slot name

        Returns:
            The stored string, or None if the slot has never been written

        Raises:
            StorageError: If the slot exists but cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Overwrite a slot.

        Args:
            key: Slot name
            value: Full new content of the slot

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """
        Remove a slot.

        Returns:
            True if the slot existed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceWarning(UserWarning):
    """
    The report history could not be read or written.

    Never raised by the engine; it names the condition in the audit log.
    """
    pass
