"""
Storage Services Package

Provides the abstract slot-storage interface and its implementations.
The report history is the only thing the engine persists.
"""

from expense_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceWarning,
    StorageError,
)
from expense_tracker.services.storage.json_file import JsonFileStorage
from expense_tracker.services.storage.memory import InMemoryStorage

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "PersistenceWarning",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
