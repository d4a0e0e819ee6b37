"""
Session Orchestrator for the Expense Tracker engine

This module ties the components together into the surface the
presentation layer talks to:
1. Expense list (status, collection, filtered view by year)
2. Selection toggling for the next report
3. Report generation, saving, deletion and the saved history

DESIGN DECISION: The orchestrator enforces the report workflow:
- Reports are generated from the selection intersected with the FULL
  collection, not only the expenses visible under the year filter
- A successful save always clears the selection that fed it

Rendering, routing and forms stay outside; they call these methods and
render what they return.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings
from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    MonthlyTotal,
    Report,
    StoreStatus,
)
from expense_tracker.services.remote import (
    ExpenseCollectionInterface,
    HttpExpenseCollection,
)
from expense_tracker.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
)
from expense_tracker.state import (
    ExpenseStore,
    ReportEngine,
    SelectionSet,
    available_years,
    filter_by_year,
    monthly_totals,
    select_by_ids,
)


class ExpenseTracker:
    """
    One user session over an expense store and a report engine.

    Flow:
    1. load() → fetch the collection
    2. set_filter_year() → choose what the list shows
    3. toggle_expense() → tick expenses for the report
    4. generate_report() → preview a frozen summary
    5. save_report() → keep it in history, clear the ticks

    The session's selection is registered with the store, so deleting
    an expense unticks it automatically.
    """

    def __init__(
        self,
        store: ExpenseStore,
        report_engine: ReportEngine,
        filter_year: Optional[int] = None,
    ):
        self._store = store
        self._reports = report_engine
        self._selection = store.new_selection()
        if filter_year is None:
            filter_year = get_settings().app.default_filter_year
        self._filter_year = int(filter_year)

    # -------------------------------------------------------------------------
    # Expense list
    # -------------------------------------------------------------------------

    @property
    def store(self) -> ExpenseStore:
        return self._store

    @property
    def status(self) -> StoreStatus:
        return self._store.status

    @property
    def last_error(self) -> Optional[str]:
        return self._store.last_error

    @property
    def is_loading(self) -> bool:
        return self._store.is_busy

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self._store.expenses

    @property
    def filter_year(self) -> int:
        return self._filter_year

    def set_filter_year(self, year: Union[int, str]) -> None:
        self._filter_year = int(year)

    @property
    def filtered_expenses(self) -> list[Expense]:
        return filter_by_year(self._store.expenses, self._filter_year)

    @property
    def available_years(self) -> list[int]:
        """Years to offer in the filter; always includes the current one."""
        years = set(available_years(self._store.expenses))
        years.add(self._filter_year)
        return sorted(years, reverse=True)

    @property
    def monthly_totals(self) -> list[MonthlyTotal]:
        """Chart data for the filtered year."""
        return monthly_totals(self.filtered_expenses)

    async def load(self) -> bool:
        return await self._store.load()

    async def add_expense(self, data: Union[ExpenseDraft, Mapping[str, Any]]) -> Optional[Expense]:
        return await self._store.add(data)

    async def remove_expense(self, expense_id: str) -> bool:
        return await self._store.remove(expense_id)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    @property
    def selection(self) -> SelectionSet:
        return self._selection

    @property
    def selected_ids(self) -> frozenset[str]:
        return self._selection.ids

    def toggle_expense(self, expense_id: str) -> bool:
        """Tick or untick an expense; returns True if it is now ticked."""
        return self._selection.toggle(expense_id)

    def is_selected(self, expense_id: str) -> bool:
        return self._selection.contains(expense_id)

    def clear_selection(self) -> None:
        self._selection.clear()

    @property
    def selected_expenses(self) -> list[Expense]:
        """Rows for the report summary table."""
        return select_by_ids(self._store.expenses, self._selection.ids)

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    @property
    def reports(self) -> tuple[Report, ...]:
        return self._reports.history

    def generate_report(self) -> Report:
        """
        Raises:
            EmptySelectionError: Nothing is ticked
        """
        return self._reports.generate(self._store.expenses, self._selection.ids)

    def save_report(self, report: Report) -> None:
        self._reports.save(report, selection=self._selection)

    def delete_report(self, report_id: str) -> bool:
        return self._reports.delete_report(report_id)

    def load_history(self) -> list[Report]:
        return self._reports.load_history()


def create_app_components(
    use_storage: bool = True,
    collection: Optional[ExpenseCollectionInterface] = None,
    storage: Optional[KeyValueStorageInterface] = None,
) -> ExpenseTracker:
    """
    Factory function to create a ready-to-use session.

    Args:
        use_storage: Whether to persist report history to the configured
                     directory. Set to False to keep history in memory.
        collection: Remote collection override (defaults to HTTP)
        storage: Slot storage override

    Returns:
        A session whose report history is already loaded. The expense
        collection is not fetched yet; await session.load().
    """
    settings = get_settings()
    audit_logger = AuditLogger()

    if storage is None:
        if use_storage:
            storage = JsonFileStorage(Path(settings.storage.directory))
        else:
            storage = InMemoryStorage()

    store = ExpenseStore(
        collection=collection or HttpExpenseCollection(),
        audit_logger=audit_logger,
    )
    report_engine = ReportEngine(
        storage=storage,
        history_key=settings.storage.history_key,
        audit_logger=audit_logger,
    )

    session = ExpenseTracker(
        store=store,
        report_engine=report_engine,
        filter_year=settings.app.default_filter_year,
    )
    session.load_history()
    return session
