"""Remote expense collection package."""

from expense_tracker.services.remote.interface import (
    ExpenseCollectionInterface,
    RemoteError,
)
from expense_tracker.services.remote.http_client import HttpExpenseCollection

__all__ = [
    "ExpenseCollectionInterface",
    "HttpExpenseCollection",
    "RemoteError",
]
