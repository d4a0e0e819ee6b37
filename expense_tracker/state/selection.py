"""
Expense Selection

Tracks which expense ids the user has ticked for the next report.

A selection created through ExpenseStore.new_selection() is bound to that
store: it refuses ids the store does not hold, and the store removes ids
from it when the expenses disappear. This keeps every id in the selection
present in the collection whenever a report is generated.
"""

from collections.abc import Callable, Iterable, Iterator
from typing import Optional


class UnknownExpenseError(KeyError):
    """Tried to select an id that is not in the expense collection."""
    pass


class SelectionSet:
    """
    A set of selected expense ids.

    Insertion order is kept so the UI can list picks in the order made.
    """

    def __init__(
        self,
        ids: Iterable[str] = (),
        membership: Optional[Callable[[str], bool]] = None,
    ):
        """
        Args:
            ids: Initially selected ids
            membership: Predicate telling whether an id exists in the
                        collection. None means any id is accepted.
        """
        self._membership = membership
        self._ids: dict[str, None] = {}
        for expense_id in ids:
            self._add(expense_id)

    def _add(self, expense_id: str) -> None:
        if self._membership is not None and not self._membership(expense_id):
            raise UnknownExpenseError(expense_id)
        self._ids[expense_id] = None

    def toggle(self, expense_id: str) -> bool:
        """
        Select the id if absent, deselect it if present.

        Returns:
            True if the id is selected after the call
        """
        if expense_id in self._ids:
            del self._ids[expense_id]
            return False
        self._add(expense_id)
        return True

    def contains(self, expense_id: str) -> bool:
        return expense_id in self._ids

    def clear(self) -> None:
        self._ids.clear()

    def discard(self, expense_id: str) -> bool:
        """Drop one id; returns True if it was selected."""
        if expense_id in self._ids:
            del self._ids[expense_id]
            return True
        return False

    def retain(self, valid_ids: Iterable[str]) -> list[str]:
        """
        Keep only ids that are in `valid_ids`.

        Returns:
            The ids that were dropped
        """
        valid = set(valid_ids)
        dropped = [expense_id for expense_id in self._ids if expense_id not in valid]
        for expense_id in dropped:
            del self._ids[expense_id]
        return dropped

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    def ordered_ids(self) -> list[str]:
        return list(self._ids)

    def __contains__(self, expense_id: object) -> bool:
        return expense_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"SelectionSet({self.ordered_ids()!r})"
