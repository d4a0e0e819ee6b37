"""
Expense Store

The authoritative in-memory cache of expenses, kept in step with the
remote expense collection.

DESIGN DECISION: No optimistic writes.
An expense appears locally only after the server returned it with an id,
and disappears only after the server confirmed the deletion. A failed call
leaves the previous collection in place and flips status to ERROR.

SEQUENCING:
- Every remote call takes a ticket from a monotonically increasing counter.
- add/remove are exclusive: while any call is in flight they raise
  StoreBusyError and never reach the collaborator.
- load is always allowed. Its response replaces the whole collection, so it
  is applied only if no newer response has been applied already. Stale
  load responses are dropped and logged.
- add/remove responses are deltas (prepend one, drop one) and always apply.
- Every call is settled however it ends. A cancelled call leaves no error
  behind; an exception other than RemoteError is recorded like a remote
  failure and then re-raised.
"""

import weakref
from collections.abc import Mapping
from typing import Any, Optional, Union

from expense_tracker.audit import AuditLogger
from expense_tracker.models.audit import AuditEventBuilder
from expense_tracker.models.expense import Expense, ExpenseDraft, StoreStatus
from expense_tracker.services.remote import ExpenseCollectionInterface, RemoteError
from expense_tracker.state.selection import SelectionSet
from expense_tracker.validation import ExpenseValidator, ValidationError


def _unexpected_message(error: Exception) -> str:
    return f"Unexpected {type(error).__name__}: {error}"


class StoreBusyError(Exception):
    """A mutation was attempted while a remote call is still in flight."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation} while another request is in progress")


class ExpenseStore:
    """
    Owns the expense collection and the remote synchronization status.

    Consumers read `expenses`, `status` and `last_error`; only the store's
    own operations change them.
    """

    def __init__(
        self,
        collection: ExpenseCollectionInterface,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._collection = collection
        self._validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger or AuditLogger()

        self._expenses: list[Expense] = []
        self._status = StoreStatus.IDLE
        self._last_error: Optional[str] = None

        # Sequencing state
        self._sequence = 0
        self._applied = 0
        self._error_ticket = 0
        self._in_flight = 0

        self._selections: "weakref.WeakSet[SelectionSet]" = weakref.WeakSet()

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def expenses(self) -> tuple[Expense, ...]:
        """The collection, most recent additions first."""
        return tuple(self._expenses)

    @property
    def status(self) -> StoreStatus:
        return self._status

    @property
    def last_error(self) -> Optional[str]:
        """Message of the last failure; None unless status is ERROR."""
        return self._last_error if self._status is StoreStatus.ERROR else None

    @property
    def is_busy(self) -> bool:
        return self._in_flight > 0

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(expense.id for expense in self._expenses)

    def contains(self, expense_id: str) -> bool:
        return any(expense.id == expense_id for expense in self._expenses)

    def get(self, expense_id: str) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    # -------------------------------------------------------------------------
    # Selections
    # -------------------------------------------------------------------------

    def new_selection(self) -> SelectionSet:
        """
        Create a selection bound to this store.

        The store holds it weakly: once the owning UI scope drops it,
        it stops receiving updates.
        """
        selection = SelectionSet(membership=self.contains)
        self._selections.add(selection)
        return selection

    def _drop_from_selections(self, expense_id: str) -> int:
        return sum(1 for selection in list(self._selections) if selection.discard(expense_id))

    def _reconcile_selections(self) -> None:
        current = self.ids
        for selection in list(self._selections):
            selection.retain(current)

    # -------------------------------------------------------------------------
    # Sequencing
    # -------------------------------------------------------------------------

    def _ensure_idle(self, operation: str) -> None:
        if self._in_flight > 0:
            self._audit_logger.log(AuditEventBuilder.mutation_rejected_busy(
                operation=operation,
                in_flight=self._in_flight,
            ))
            raise StoreBusyError(operation)

    def _begin(self) -> int:
        self._sequence += 1
        self._in_flight += 1
        self._status = StoreStatus.LOADING
        self._last_error = None
        self._error_ticket = 0
        return self._sequence

    def _refresh_status(self) -> None:
        if self._last_error is not None:
            self._status = StoreStatus.ERROR
        elif self._in_flight > 0:
            self._status = StoreStatus.LOADING
        else:
            self._status = StoreStatus.IDLE

    def _finish_success(self, ticket: int, operation: str, replaces_state: bool) -> bool:
        """
        Settle a successful call.

        Returns False if the response is stale and must not be applied.
        """
        self._in_flight -= 1

        if replaces_state and ticket < self._applied:
            self._audit_logger.log_stale_response(operation, ticket, self._applied)
            self._refresh_status()
            return False

        self._applied = max(self._applied, ticket)
        if self._error_ticket and self._error_ticket < ticket:
            self._last_error = None
            self._error_ticket = 0
        self._refresh_status()
        return True

    def _finish_failure(
        self,
        ticket: int,
        operation: str,
        message: str,
        replaces_state: bool,
    ) -> bool:
        """
        Settle a failed call.

        Returns False if the failure is stale and was not recorded.
        """
        self._in_flight -= 1

        if replaces_state and ticket < self._applied:
            self._audit_logger.log_stale_response(operation, ticket, self._applied)
            self._refresh_status()
            return False

        if ticket > self._error_ticket:
            self._last_error = message
            self._error_ticket = ticket
        self._refresh_status()
        return True

    def _abandon(self) -> None:
        """Settle a cancelled call; nothing is applied or recorded."""
        self._in_flight -= 1
        self._refresh_status()

    # -------------------------------------------------------------------------
    # Remote operations
    # -------------------------------------------------------------------------

    async def load(self) -> bool:
        """
        Replace the collection with the server's.

        Returns:
            True if the response was applied. On failure the previous
            collection stays available and status is ERROR.
        """
        ticket = self._begin()
        try:
            fetched = await self._collection.fetch_all()
        except RemoteError as e:
            self._load_failed(ticket, e.message)
            return False
        except Exception as e:
            self._load_failed(ticket, _unexpected_message(e))
            raise
        except BaseException:
            self._abandon()
            raise

        if not self._finish_success(ticket, "load", replaces_state=True):
            return False

        self._expenses = list(fetched)
        self._reconcile_selections()
        self._audit_logger.log(AuditEventBuilder.expenses_loaded(
            count=len(self._expenses),
            ticket=ticket,
        ))
        return True

    def _load_failed(self, ticket: int, message: str) -> None:
        if self._finish_failure(ticket, "load", message, replaces_state=True):
            self._audit_logger.log(AuditEventBuilder.expenses_load_failed(
                error_message=message,
                ticket=ticket,
            ))

    async def add(self, data: Union[ExpenseDraft, Mapping[str, Any]]) -> Optional[Expense]:
        """
        Create an expense on the server and prepend it locally.

        Raises:
            ValidationError: Invalid input; the server is never contacted
            StoreBusyError: Another remote call is in flight

        Returns:
            The created expense, or None if the remote call failed
        """
        try:
            draft = self._validator.validate(data)
        except ValidationError as e:
            self._audit_logger.log(AuditEventBuilder.expense_validation_failed(
                issues=[issue.model_dump() for issue in e.issues],
            ))
            raise

        self._ensure_idle("add")
        ticket = self._begin()
        try:
            created = await self._collection.create(draft)
        except RemoteError as e:
            self._add_failed(ticket, draft, e.message)
            return None
        except Exception as e:
            self._add_failed(ticket, draft, _unexpected_message(e))
            raise
        except BaseException:
            self._abandon()
            raise

        self._finish_success(ticket, "add", replaces_state=False)
        # a load that finished first may already hold it
        if not self.contains(created.id):
            self._expenses.insert(0, created)
        self._audit_logger.log(AuditEventBuilder.expense_added(
            expense_id=created.id,
            title=created.title,
            amount=str(created.amount),
        ))
        return created

    def _add_failed(self, ticket: int, draft: ExpenseDraft, message: str) -> None:
        self._finish_failure(ticket, "add", message, replaces_state=False)
        self._audit_logger.log(AuditEventBuilder.expense_add_failed(
            title=draft.title,
            error_message=message,
        ))

    async def remove(self, expense_id: str) -> bool:
        """
        Delete an expense on the server, then locally and from every
        bound selection.

        Raises:
            StoreBusyError: Another remote call is in flight

        Returns:
            True if the server confirmed the deletion
        """
        self._ensure_idle("remove")
        ticket = self._begin()
        try:
            confirmed = await self._collection.delete(expense_id)
        except RemoteError as e:
            self._remove_failed(ticket, expense_id, e.message)
            return False
        except Exception as e:
            self._remove_failed(ticket, expense_id, _unexpected_message(e))
            raise
        except BaseException:
            self._abandon()
            raise

        if not confirmed:
            self._remove_failed(
                ticket,
                expense_id,
                f"Server did not confirm deletion of expense {expense_id}",
            )
            return False

        self._finish_success(ticket, "remove", replaces_state=False)
        self._expenses = [expense for expense in self._expenses if expense.id != expense_id]
        updated = self._drop_from_selections(expense_id)
        self._audit_logger.log(AuditEventBuilder.expense_removed(
            expense_id=expense_id,
            selections_updated=updated,
        ))
        return True

    def _remove_failed(self, ticket: int, expense_id: str, message: str) -> None:
        self._finish_failure(ticket, "remove", message, replaces_state=False)
        self._audit_logger.log(AuditEventBuilder.expense_remove_failed(
            expense_id=expense_id,
            error_message=message,
        ))
