"""
Report Engine

Turns a selection into a frozen Report and keeps the saved report history.

DESIGN DECISION: History is best-effort.
It lives in one slot of a key-value store, is read once at startup and
rewritten in full after every change. A failed read gives an empty
history; a failed write keeps the in-memory history as it is. Both are
logged and issued as PersistenceWarning, never raised.

ORDERING: most recent first. save() prepends, and the slot stores the
list in that same order, so a reload reproduces it exactly.
"""

import warnings
from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.models.audit import AuditEventBuilder
from expense_tracker.models.expense import Expense, Report
from expense_tracker.services.storage import (
    KeyValueStorageInterface,
    PersistenceWarning,
    StorageError,
)
from expense_tracker.state.selection import SelectionSet


_HISTORY_ADAPTER = TypeAdapter(list[Report])


class EmptySelectionError(ValueError):
    """A report was requested with nothing (matching) selected."""
    pass


class ReportEngine:
    """
    Mints reports and owns the persisted report history.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        history_key: str = "savedReports",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._history_key = history_key
        self._audit_logger = audit_logger or AuditLogger()
        self._history: list[Report] = []

    @property
    def history(self) -> tuple[Report, ...]:
        """Saved reports, most recent first."""
        return tuple(self._history)

    @property
    def history_key(self) -> str:
        return self._history_key

    def get(self, report_id: str) -> Optional[Report]:
        for report in self._history:
            if report.id == report_id:
                return report
        return None

    def generate(self, expenses: Iterable[Expense], selected_ids: Iterable[str]) -> Report:
        """
        Summarize the selected expenses.

        Only ids present in `expenses` count. The total is an exact Decimal
        sum, so the result does not depend on selection order.

        Raises:
            EmptySelectionError: Nothing selected, or no selected id matches
        """
        wanted = set(selected_ids)
        if not wanted:
            raise EmptySelectionError("Select at least one expense to generate a report")

        total = Decimal("0")
        counted: set[str] = set()
        for expense in expenses:
            if expense.id in wanted and expense.id not in counted:
                counted.add(expense.id)
                total += expense.amount

        if not counted:
            raise EmptySelectionError("None of the selected expenses exist any more")

        report = Report(total=total, item_count=len(counted))
        self._audit_logger.log(AuditEventBuilder.report_generated(
            report_id=report.id,
            total=str(report.total),
            item_count=report.item_count,
        ))
        return report

    def save(self, report: Report, selection: Optional[SelectionSet] = None) -> None:
        """
        Add a report to the front of the history and persist it.

        The selection that produced the report, if given, is cleared
        afterwards. Saving a report that is already in history changes
        nothing but still clears the selection.
        """
        if self.get(report.id) is None:
            self._history.insert(0, report)
            self._persist()
            self._audit_logger.log(AuditEventBuilder.report_saved(
                report_id=report.id,
                history_size=len(self._history),
            ))

        if selection is not None:
            selection.clear()

    def delete_report(self, report_id: str) -> bool:
        """
        Remove a report by id and persist. Unknown ids are a no-op.

        Returns:
            True if a report was removed
        """
        remaining = [report for report in self._history if report.id != report_id]
        if len(remaining) == len(self._history):
            return False

        self._history = remaining
        self._persist()
        self._audit_logger.log(AuditEventBuilder.report_deleted(
            report_id=report_id,
            history_size=len(self._history),
        ))
        return True

    def load_history(self) -> list[Report]:
        """
        Read the persisted history, replacing the in-memory one.

        Missing data is an empty history. Unreadable or corrupt data is
        also an empty history, with a persistence warning in the log.
        """
        try:
            raw = self._storage.get(self._history_key)
            history = _HISTORY_ADAPTER.validate_json(raw) if raw else []
        except (StorageError, OSError, PydanticValidationError) as e:
            self._warn("load", e)
            history = []

        self._history = list(history)
        self._audit_logger.log(AuditEventBuilder.history_loaded(
            key=self._history_key,
            count=len(self._history),
        ))
        return list(self._history)

    def _persist(self) -> None:
        try:
            payload = _HISTORY_ADAPTER.dump_json(self._history).decode("utf-8")
            self._storage.set(self._history_key, payload)
        except (StorageError, OSError) as e:
            self._warn("save", e)

    def _warn(self, operation: str, error: Exception) -> None:
        self._audit_logger.log_persistence_warning(operation, self._history_key, error)
        warnings.warn(
            f"Report history {operation} failed for slot {self._history_key!r}: {error}",
            PersistenceWarning,
            stacklevel=3,
        )
