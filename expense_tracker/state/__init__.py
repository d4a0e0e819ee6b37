"""
State Package

The engine's four components: the expense store, view derivations,
selections and the report engine.
"""

from expense_tracker.state.reports import EmptySelectionError, ReportEngine
from expense_tracker.state.selection import SelectionSet, UnknownExpenseError
from expense_tracker.state.store import ExpenseStore, StoreBusyError
from expense_tracker.state.view_filter import (
    MONTH_LABELS,
    available_years,
    filter_by_year,
    monthly_totals,
    select_by_ids,
)

__all__ = [
    # Store
    "ExpenseStore",
    "StoreBusyError",
    # Selection
    "SelectionSet",
    "UnknownExpenseError",
    # Reports
    "EmptySelectionError",
    "ReportEngine",
    # View derivations
    "MONTH_LABELS",
    "available_years",
    "filter_by_year",
    "monthly_totals",
    "select_by_ids",
]
