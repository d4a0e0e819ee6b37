"""
Audit Logger

DESIGN DECISION: Every state transition in the engine is logged.
This provides:
1. Traceability of remote calls and their outcomes
2. Debugging capability when responses arrive out of order
3. Operators can detect a corrupt report history slot

The audit logger:
- Is synchronous; it only writes to the local structured log
- Picks the log level from the event severity
"""

from typing import Optional

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Every component takes an optional AuditLogger; when none is given
    it creates its own, so events are never silently dropped.
    """

    def __init__(self, logger_name: Optional[str] = None):
        self._logger = structlog.get_logger(logger_name or "expense_tracker")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_persistence_warning(
        self,
        operation: str,
        key: str,
        error: Exception,
    ) -> None:
        """Log a failed read or write of the report history slot."""
        self.log(AuditEventBuilder.persistence_warning(
            operation=operation,
            key=key,
            error_message=f"{type(error).__name__}: {error}",
        ))

    def log_stale_response(self, operation: str, ticket: int, applied: int) -> None:
        """Log a remote response discarded by the sequence guard."""
        self.log(AuditEventBuilder.stale_response_dropped(
            operation=operation,
            ticket=ticket,
            applied=applied,
        ))
