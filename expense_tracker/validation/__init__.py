"""Validation package."""

from expense_tracker.validation.validator import ExpenseValidator, ValidationError

__all__ = ["ExpenseValidator", "ValidationError"]
