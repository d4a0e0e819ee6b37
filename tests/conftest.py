"""
Shared fixtures: a scripted remote collection and a recording audit logger.

No real HTTP calls are made anywhere in the test suite.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.models.audit import AuditEvent, AuditEventType
from expense_tracker.models.expense import Expense, ExpenseDraft
from expense_tracker.services.remote import ExpenseCollectionInterface
from expense_tracker.services.storage import InMemoryStorage
from expense_tracker.state import ExpenseStore, ReportEngine


class FakeExpenseCollection(ExpenseCollectionInterface):
    """
    In-memory stand-in for the remote collection.

    - Counts calls per operation
    - `fail_with` makes the next calls raise that exception
    - `gates` makes calls wait on an asyncio.Event (one gate per call,
      consumed in order) so tests can interleave responses
    - fetch_all snapshots the records when called, not when it returns
    """

    def __init__(self, expenses: Optional[list[Expense]] = None):
        self.expenses: list[Expense] = list(expenses or [])
        self.fetch_calls = 0
        self.create_calls = 0
        self.delete_calls = 0
        self.fail_with: Optional[Exception] = None
        self.delete_result = True
        self.gates: list[asyncio.Event] = []
        self._next_id = 100

    async def _wait_for_gate(self) -> None:
        if self.gates:
            gate = self.gates.pop(0)
            await gate.wait()

    async def fetch_all(self) -> list[Expense]:
        self.fetch_calls += 1
        snapshot = list(self.expenses)
        await self._wait_for_gate()
        if self.fail_with is not None:
            raise self.fail_with
        return snapshot

    async def create(self, draft: ExpenseDraft) -> Expense:
        self.create_calls += 1
        await self._wait_for_gate()
        if self.fail_with is not None:
            raise self.fail_with
        self._next_id += 1
        created = Expense(
            id=str(self._next_id),
            title=draft.title,
            amount=draft.amount,
            date=draft.date,
        )
        self.expenses.append(created)
        return created

    async def delete(self, expense_id: str) -> bool:
        self.delete_calls += 1
        await self._wait_for_gate()
        if self.fail_with is not None:
            raise self.fail_with
        if self.delete_result:
            self.expenses = [e for e in self.expenses if e.id != expense_id]
        return self.delete_result


class RecordingAuditLogger(AuditLogger):
    """AuditLogger that also keeps every event for assertions."""

    def __init__(self):
        super().__init__("expense_tracker.tests")
        self.events: list[AuditEvent] = []

    def log(self, event: AuditEvent) -> None:
        self.events.append(event)
        super().log(event)

    def of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        return [event for event in self.events if event.event_type == event_type]


def make_expense(expense_id: str, title: str, amount: str, on: date) -> Expense:
    return Expense(id=expense_id, title=title, amount=Decimal(amount), date=on)


@pytest.fixture
def rent() -> Expense:
    return make_expense("e1", "Rent", "1000", date(2023, 1, 5))


@pytest.fixture
def travel() -> Expense:
    return make_expense("e2", "Travel", "250", date(2024, 3, 2))


@pytest.fixture
def expense_factory():
    return make_expense


@pytest.fixture
def audit_logger() -> RecordingAuditLogger:
    return RecordingAuditLogger()


@pytest.fixture
def collection(rent, travel) -> FakeExpenseCollection:
    return FakeExpenseCollection([rent, travel])


@pytest.fixture
def store(collection, audit_logger) -> ExpenseStore:
    return ExpenseStore(collection=collection, audit_logger=audit_logger)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def report_engine(storage, audit_logger) -> ReportEngine:
    return ReportEngine(storage=storage, audit_logger=audit_logger)


@pytest.fixture
def collection_factory():
    return FakeExpenseCollection
