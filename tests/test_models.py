"""
Tests for the Expense Tracker models

Test strategy:
1. Unit tests for individual components (models, validators, derivations)
2. Flow tests for the store and report engine with scripted collaborators
3. No real API calls in tests (use fakes and mocked sessions)
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    MonthlyTotal,
    Report,
    StoreStatus,
    coerce_calendar_date,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestExpenseModels:
    """Tests for the expense models."""

    def test_expense_creation(self):
        """Test Expense model creation."""
        expense = Expense(
            id="e1",
            title="Rent",
            amount=Decimal("1000.00"),
            date=date(2023, 1, 5),
        )
        assert expense.title == "Rent"
        assert expense.amount == Decimal("1000.00")
        assert expense.year == 2023

    def test_expense_coerces_numeric_id(self):
        """Test that json-server numeric ids become strings."""
        expense = Expense(id=7, title="Fuel", amount="40", date="2023-02-01")
        assert expense.id == "7"

    def test_expense_normalizes_timestamp_dates(self):
        """Test that serialized timestamps keep only their date part."""
        expense = Expense(
            id="e1",
            title="Fuel",
            amount=40,
            date="2023-01-05T00:00:00.000Z",
        )
        assert expense.date == date(2023, 1, 5)

    def test_expense_accepts_string_amounts(self):
        """Test that string amounts from the server parse exactly."""
        expense = Expense(id="e1", title="Fuel", amount="15.50", date="2023-01-05")
        assert expense.amount == Decimal("15.50")

    def test_expense_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Expense(id="e1", title="Refund", amount="-1", date="2023-01-05")

    def test_expense_rejects_blank_title(self):
        """Test that whitespace-only titles are rejected."""
        with pytest.raises(ValueError):
            Expense(id="e1", title="   ", amount="1", date="2023-01-05")

    def test_expense_is_frozen(self):
        """Test that expenses cannot be modified."""
        expense = Expense(id="e1", title="Rent", amount="1", date="2023-01-05")
        with pytest.raises(ValueError):
            expense.amount = Decimal("2")

    def test_draft_payload(self):
        """Test the create payload sent to the server."""
        draft = ExpenseDraft(title=" Fuel ", amount="12.50", date="2024-06-01")
        assert draft.to_payload() == {
            "title": "Fuel",
            "amount": 12.5,
            "date": "2024-06-01",
        }

    def test_draft_rejects_zero_amount(self):
        """Test that a new expense must cost something."""
        with pytest.raises(ValueError):
            ExpenseDraft(title="Free", amount="0", date="2024-06-01")

    def test_draft_rejects_infinite_amount(self):
        """Test that non-finite amounts are rejected."""
        with pytest.raises(ValueError, match="finite"):
            ExpenseDraft(title="Fuel", amount=float("inf"), date="2024-06-01")

    def test_draft_unparseable_amount_uses_decimal_error(self):
        """Test that text which is not a number is left to the Decimal field."""
        with pytest.raises(PydanticValidationError) as exc_info:
            ExpenseDraft(title="Fuel", amount="twelve", date="2024-06-01")

        errors = exc_info.value.errors()
        assert [error["loc"] for error in errors] == [("amount",)]
        assert "finite" not in errors[0]["msg"]

    def test_draft_accepts_long_title(self):
        """Test that titles have no upper length limit."""
        title = "Quarterly office supplies " * 20
        draft = ExpenseDraft(title=title, amount="5", date="2024-06-01")
        assert draft.title == title.strip()


class TestCoerceCalendarDate:
    """Tests for the date normalization helper."""

    def test_plain_date_string(self):
        assert coerce_calendar_date("2024-03-02") == date(2024, 3, 2)

    def test_datetime_value(self):
        assert coerce_calendar_date(datetime(2024, 3, 2, 18, 30)) == date(2024, 3, 2)

    def test_offset_timestamp(self):
        assert coerce_calendar_date("2024-03-02T10:00:00+02:00") == date(2024, 3, 2)

    def test_unreadable_value_passes_through(self):
        assert coerce_calendar_date("yesterday") == "yesterday"


class TestReportModel:
    """Tests for the Report model."""

    def test_report_defaults(self):
        """Test that id and timestamp are generated."""
        report = Report(total=Decimal("25.50"), item_count=2)
        assert report.id
        assert report.generated_at.tzinfo is not None
        assert report.generated_at <= datetime.now(timezone.utc)

    def test_report_ids_are_unique(self):
        first = Report(total=Decimal("1"), item_count=1)
        second = Report(total=Decimal("1"), item_count=1)
        assert first.id != second.id

    def test_report_requires_items(self):
        """Test that a zero-item report cannot exist."""
        with pytest.raises(ValueError):
            Report(total=Decimal("0"), item_count=0)

    def test_monthly_total_defaults_to_zero(self):
        bucket = MonthlyTotal(month=1, label="Jan")
        assert bucket.total == Decimal("0")

    def test_store_status_values(self):
        assert StoreStatus.IDLE.value == "idle"
        assert StoreStatus.LOADING.value == "loading"
        assert StoreStatus.ERROR.value == "error"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSES_LOADED,
            description="Loaded",
        )
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.expense_added(
            expense_id="e1",
            title="Rent",
            amount="1000",
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["entity_id"] == "e1"
        assert log_dict["details"]["amount"] == "1000"

    def test_persistence_warning_is_warning(self):
        """Test AuditEventBuilder.persistence_warning."""
        event = AuditEventBuilder.persistence_warning(
            operation="load",
            key="savedReports",
            error_message="bad json",
        )
        assert event.event_type == AuditEventType.PERSISTENCE_WARNING
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == "savedReports"
        assert event.error_message == "bad json"

    def test_load_failure_is_error(self):
        event = AuditEventBuilder.expenses_load_failed(
            error_message="Failed to fetch!",
            ticket=3,
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.details["ticket"] == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
