"""
Data Models Package

This package contains all Pydantic models used by the Expense Tracker engine.
All data flowing through the engine must conform to these schemas.
"""

from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    MonthlyTotal,
    Report,
    StoreStatus,
    ValidationIssue,
    coerce_calendar_date,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "Expense",
    "ExpenseDraft",
    "MonthlyTotal",
    "Report",
    "StoreStatus",
    "ValidationIssue",
    "coerce_calendar_date",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
