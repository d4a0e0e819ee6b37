"""
Abstract Remote Collection Interface

DESIGN DECISION: The expense store never talks HTTP directly.
It depends on this interface, which lets us:
1. Point the engine at any REST backend with the same three operations
2. Use scripted fakes in tests (call counts, delayed responses, failures)
3. Keep the sequencing and status logic independent of transport

Only three operations exist because the engine needs nothing else:
fetch everything, create one, delete one.
"""

from abc import ABC, abstractmethod
from typing import Optional

from expense_tracker.models.expense import Expense, ExpenseDraft


class ExpenseCollectionInterface(ABC):
    """
    Abstract interface for the remote expense collection.

    All operations are coroutines. Implementations report every failure
    as RemoteError.
    """

    @abstractmethod
    async def fetch_all(self) -> list[Expense]:
        """
        Fetch the whole collection.

        Returns:
            Every expense the server holds, in server order

        Raises:
            RemoteError: If the call fails or returns malformed records
        """
        pass

    @abstractmethod
    async def create(self, draft: ExpenseDraft) -> Expense:
        """
        Create an expense.

        Args:
            draft: Validated user input

        Returns:
            The created expense, including its server-assigned id

        Raises:
            RemoteError: If the call fails
        """
        pass

    @abstractmethod
    async def delete(self, expense_id: str) -> bool:
        """
        Delete an expense by id.

        Returns:
            True if the server confirmed the deletion

        Raises:
            RemoteError: If the call fails
        """
        pass


class RemoteError(Exception):
    """
    A call to the remote collection failed.

    `message` is the server's own explanation when it gave one, kept
    verbatim for display. `status_code` is None for network failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
