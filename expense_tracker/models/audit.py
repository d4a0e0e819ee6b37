"""
Audit Models for the Expense Tracker engine

Every state transition in the engine is logged as an audit event.
This provides:
1. Traceability of what the remote collection told us and when
2. Debugging information when a remote call or a storage write fails
3. A visible signal when the persisted report history is corrupt

DESIGN DECISION: Events are built through AuditEventBuilder so that the
same transition always produces the same event shape.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Every store and report operation has its own event type."""
    # Expense collection
    EXPENSES_LOADED = "expenses_loaded"
    EXPENSES_LOAD_FAILED = "expenses_load_failed"
    EXPENSE_ADDED = "expense_added"
    EXPENSE_ADD_FAILED = "expense_add_failed"
    EXPENSE_VALIDATION_FAILED = "expense_validation_failed"
    EXPENSE_REMOVED = "expense_removed"
    EXPENSE_REMOVE_FAILED = "expense_remove_failed"

    # Sequencing
    STALE_RESPONSE_DROPPED = "stale_response_dropped"
    MUTATION_REJECTED_BUSY = "mutation_rejected_busy"

    # Reports
    REPORT_GENERATED = "report_generated"
    REPORT_SAVED = "report_saved"
    REPORT_DELETED = "report_deleted"
    HISTORY_LOADED = "history_loaded"

    # Storage
    PERSISTENCE_WARNING = "persistence_warning"


class AuditSeverity(str, Enum):
    """Maps onto the structlog level the event is written at."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    One state transition of the engine.

    Events are only written to the local structured log; nothing persists them.
    """

    # Identity and time
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # What kind of transition
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Subject: an expense, a report, the collection or the history slot
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'report', 'history')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Failure message, verbatim from the collaborator
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Flatten to JSON-friendly keyword arguments for structlog."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    One static constructor per event type, so each transition always
    logs the same fields.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, title, amount)
        event = AuditEventBuilder.persistence_warning("save", key, error)
    """

    @staticmethod
    def expenses_loaded(count: int, ticket: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LOADED,
            entity_type="collection",
            description=f"Loaded {count} expenses from the remote collection",
            details={"count": count, "ticket": ticket},
        )

    @staticmethod
    def expenses_load_failed(error_message: str, ticket: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="collection",
            description="Failed to load expenses; keeping the previous collection",
            details={"ticket": ticket},
            error_message=error_message,
        )

    @staticmethod
    def expense_added(expense_id: str, title: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense added: {title}",
            details={"title": title, "amount": amount},
        )

    @staticmethod
    def expense_add_failed(title: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            description=f"Failed to add expense: {title}",
            details={"title": title},
            error_message=error_message,
        )

    @staticmethod
    def expense_validation_failed(issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            description=f"Expense rejected with {len(issues)} validation issue(s)",
            details={"issues": issues},
        )

    @staticmethod
    def expense_removed(expense_id: str, selections_updated: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REMOVED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense removed: {expense_id}",
            details={"selections_updated": selections_updated},
        )

    @staticmethod
    def expense_remove_failed(expense_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REMOVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Failed to remove expense: {expense_id}",
            error_message=error_message,
        )

    @staticmethod
    def stale_response_dropped(operation: str, ticket: int, applied: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STALE_RESPONSE_DROPPED,
            severity=AuditSeverity.WARNING,
            entity_type="collection",
            description=f"Dropped stale {operation} response",
            details={"operation": operation, "ticket": ticket, "applied_ticket": applied},
        )

    @staticmethod
    def mutation_rejected_busy(operation: str, in_flight: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_REJECTED_BUSY,
            severity=AuditSeverity.WARNING,
            entity_type="collection",
            description=f"Rejected {operation}: a remote call is already in flight",
            details={"operation": operation, "in_flight": in_flight},
        )

    @staticmethod
    def report_generated(report_id: str, total: str, item_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            entity_type="report",
            entity_id=report_id,
            description=f"Report generated over {item_count} expense(s)",
            details={"total": total, "item_count": item_count},
        )

    @staticmethod
    def report_saved(report_id: str, history_size: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_SAVED,
            entity_type="report",
            entity_id=report_id,
            description="Report saved to history",
            details={"history_size": history_size},
        )

    @staticmethod
    def report_deleted(report_id: str, history_size: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_DELETED,
            entity_type="report",
            entity_id=report_id,
            description="Report deleted from history",
            details={"history_size": history_size},
        )

    @staticmethod
    def history_loaded(key: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HISTORY_LOADED,
            entity_type="history",
            entity_id=key,
            description=f"Loaded {count} saved report(s)",
            details={"count": count},
        )

    @staticmethod
    def persistence_warning(operation: str, key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSISTENCE_WARNING,
            severity=AuditSeverity.WARNING,
            entity_type="history",
            entity_id=key,
            description=f"Report history {operation} failed; continuing without it",
            details={"operation": operation},
            error_message=error_message,
        )
