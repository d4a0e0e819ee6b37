"""
Expense Input Validation

DESIGN DECISION: New expenses are validated locally before any remote call.
A bad title, amount or date never reaches the server.

The validator:
- Accepts a mapping (raw form data) or an ExpenseDraft
- Collects every issue at once so the form can show them together
- NEVER silently fixes input beyond stripping whitespace
"""

from collections.abc import Mapping
from typing import Any, Union

from pydantic import ValidationError as PydanticValidationError

from expense_tracker.models.expense import ExpenseDraft, ValidationIssue


# Hints shown next to each field
_SUGGESTED_FIXES = {
    "title": "Enter a short description, e.g. 'Fuel'",
    "amount": "Enter a positive amount such as 12.50",
    "date": "Pick a date in YYYY-MM-DD format",
}


class ValidationError(Exception):
    """
    User input for a new expense is invalid.

    Raised before any remote call; correcting the input and retrying
    is always enough.
    """

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        summary = "; ".join(f"{issue.field}: {issue.message}" for issue in issues)
        super().__init__(f"Invalid expense: {summary}")

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]


def _issue_type(pydantic_type: str) -> str:
    if pydantic_type == "missing":
        return "missing"
    if pydantic_type in ("string_too_short", "greater_than", "value_error"):
        return "invalid_value"
    return "invalid_format"


class ExpenseValidator:
    """
    Validates user input for a new expense.

    Checks:
    - title is present and not blank
    - amount is a positive, finite number
    - date is a valid calendar date
    """

    def validate(self, data: Union[ExpenseDraft, Mapping[str, Any]]) -> ExpenseDraft:
        """
        Return a validated draft or raise ValidationError listing every issue.
        """
        if isinstance(data, ExpenseDraft):
            return data

        if not isinstance(data, Mapping):
            raise ValidationError([ValidationIssue(
                field="expense",
                issue_type="invalid_format",
                message="Expense data must be a mapping of title, amount and date",
            )])

        try:
            return ExpenseDraft.model_validate(dict(data))
        except PydanticValidationError as e:
            raise ValidationError(self._to_issues(e))

    def _to_issues(self, error: PydanticValidationError) -> list[ValidationIssue]:
        issues = []
        for detail in error.errors():
            field = str(detail["loc"][0]) if detail["loc"] else "expense"
            message = detail["msg"]
            # pydantic prefixes messages from custom validators
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            issues.append(ValidationIssue(
                field=field,
                issue_type=_issue_type(detail["type"]),
                message=message,
                suggested_fix=_SUGGESTED_FIXES.get(field),
            ))
        return issues
