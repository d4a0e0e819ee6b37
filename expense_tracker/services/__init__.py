"""Services package."""

from expense_tracker.services.remote import (
    ExpenseCollectionInterface,
    HttpExpenseCollection,
    RemoteError,
)
from expense_tracker.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    PersistenceWarning,
    StorageError,
)

__all__ = [
    # Remote collection
    "ExpenseCollectionInterface",
    "HttpExpenseCollection",
    "RemoteError",
    # Storage services
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorageInterface",
    "PersistenceWarning",
    "StorageError",
]
