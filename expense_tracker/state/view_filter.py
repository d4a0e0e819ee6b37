"""
View Derivations

Pure functions over an expense collection. No side effects and no memory
between calls, so the presentation layer can call them on every render.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Union

from expense_tracker.models.expense import Expense, MonthlyTotal


MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def filter_by_year(expenses: Iterable[Expense], year: Union[int, str]) -> list[Expense]:
    """
    Return the expenses dated in `year`, keeping their relative order.

    The year is compared as an integer, so "2023" and 2023 select the same
    expenses. An empty collection and a year with no expenses both give [].
    """
    target = int(year)
    return [expense for expense in expenses if expense.date.year == target]


def available_years(expenses: Iterable[Expense]) -> list[int]:
    """Distinct years present in the collection, newest first."""
    return sorted({expense.date.year for expense in expenses}, reverse=True)


def monthly_totals(expenses: Iterable[Expense]) -> list[MonthlyTotal]:
    """
    Sum amounts into twelve calendar-month buckets, Jan to Dec.

    Usually fed the output of filter_by_year; months from different years
    land in the same bucket otherwise.
    """
    totals = [Decimal("0")] * 12
    for expense in expenses:
        totals[expense.date.month - 1] += expense.amount

    return [
        MonthlyTotal(month=index + 1, label=label, total=totals[index])
        for index, label in enumerate(MONTH_LABELS)
    ]


def select_by_ids(expenses: Iterable[Expense], ids: Iterable[str]) -> list[Expense]:
    """The expenses whose id is in `ids`, in collection order."""
    wanted = set(ids)
    return [expense for expense in expenses if expense.id in wanted]
