"""
Core Data Models for the Expense Tracker engine

These models define the strict schemas for all data flowing through the engine.
They are designed to:
1. Normalize what the remote collection sends (ids, amounts, dates)
2. Provide clear validation error messages
3. Be serializable for the persisted report history

DESIGN DECISION: Expenses and reports are frozen.
There is no update operation; a changed expense is a different expense,
and a report's total is fixed at the moment it is generated.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def coerce_calendar_date(value: Any) -> Any:
    """
    Reduce a date-like value to a calendar date.

    The remote collection stores whatever the client sent, so a date may
    arrive as "2023-01-05" or as a serialized timestamp such as
    "2023-01-05T00:00:00.000Z". Only the date part is kept.
    Values that cannot be read are passed through for pydantic to reject.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str):
        text = value.strip()
        try:
            return dt.date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return dt.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            return value
    return value


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class StoreStatus(str, Enum):
    """
    Status of the expense store's remote synchronization.

    ERROR is sticky until the next remote operation starts.
    """
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class Expense(BaseModel):
    """
    A single dated expense as held by the remote collection.

    The id is assigned by the server and never reused.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Server-assigned identifier"
    )
    title: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount in currency units"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the expense"
    )

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """json-server style backends hand out numeric ids."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date(cls, v: Any) -> Any:
        return coerce_calendar_date(v)

    @property
    def year(self) -> int:
        return self.date.year


class ExpenseDraft(BaseModel):
    """
    User-entered data for a new expense, before the server assigns an id.

    Stricter than Expense: a new expense must cost something.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    title: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in currency units (must be positive)"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the expense"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def reject_non_finite(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("Amount must be a number")
        try:
            number = Decimal(str(v).strip())
        except InvalidOperation:
            return v
        if not number.is_finite():
            raise ValueError("Amount must be a finite number")
        return v

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date(cls, v: Any) -> Any:
        return coerce_calendar_date(v)

    def to_payload(self) -> dict:
        """
        Body for the remote create call.

        JSON has no decimal type, so the amount goes out as a number.
        """
        return {
            "title": self.title,
            "amount": float(self.amount),
            "date": self.date.isoformat(),
        }


# =============================================================================
# REPORT MODELS
# =============================================================================

class Report(BaseModel):
    """
    A frozen summary of the expenses selected at generation time.

    CRITICAL: total and item_count are never recomputed, even if the
    source expenses are later deleted.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Locally generated identifier"
    )
    generated_at: dt.datetime = Field(
        default_factory=utc_now,
        description="When the report was generated (UTC)"
    )
    total: Decimal = Field(
        ...,
        ge=0,
        description="Sum of the selected amounts"
    )
    item_count: int = Field(
        ...,
        ge=1,
        description="Number of expenses included"
    )


class MonthlyTotal(BaseModel):
    """One bar of the monthly spending chart."""
    model_config = ConfigDict(frozen=True)

    month: int = Field(ge=1, le=12)
    label: str
    total: Decimal = Field(default=Decimal("0"))


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem with user-entered expense data."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )
