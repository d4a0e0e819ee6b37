"""
Tests for HttpExpenseCollection

The requests session is mocked; responses are real requests.Response
objects so status and body handling run unmodified.
"""

import asyncio
import json
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from expense_tracker.models.expense import ExpenseDraft
from expense_tracker.services.remote import HttpExpenseCollection, RemoteError


BASE_URL = "http://api.test/expenses"


def make_response(status_code: int, body=None, text: str = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    if text is not None:
        response._content = text.encode("utf-8")
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = b""
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return HttpExpenseCollection(base_url=BASE_URL + "/", timeout_seconds=5, session=session)


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(HttpExpenseCollection._get_all.retry, "sleep", lambda seconds: None)


class TestFetchAll:
    """Tests for fetching the collection."""

    def test_parses_records(self, client, session):
        session.get.return_value = make_response(200, [
            {"id": 1, "title": "Rent", "amount": 1000, "date": "2023-01-05T00:00:00.000Z"},
            {"id": "e2", "title": "Travel", "amount": "250.40", "date": "2024-03-02"},
        ])

        expenses = asyncio.run(client.fetch_all())

        assert [e.id for e in expenses] == ["1", "e2"]
        assert expenses[0].date == date(2023, 1, 5)
        assert expenses[1].amount == Decimal("250.40")
        session.get.assert_called_once_with(BASE_URL, timeout=5)

    def test_empty_collection(self, client, session):
        session.get.return_value = make_response(200, [])
        assert asyncio.run(client.fetch_all()) == []

    def test_server_error_message_is_kept(self, client, session):
        session.get.return_value = make_response(500, {"message": "Failed to fetch!"})

        with pytest.raises(RemoteError) as exc_info:
            asyncio.run(client.fetch_all())

        assert exc_info.value.message == "Failed to fetch!"
        assert exc_info.value.status_code == 500

    def test_plain_text_error_body(self, client, session):
        session.get.return_value = make_response(502, text="Bad Gateway")

        with pytest.raises(RemoteError, match="Bad Gateway"):
            asyncio.run(client.fetch_all())

    def test_empty_error_body_uses_default_message(self, client, session):
        session.get.return_value = make_response(404)

        with pytest.raises(RemoteError) as exc_info:
            asyncio.run(client.fetch_all())

        assert exc_info.value.message == "Failed to fetch expenses (HTTP 404)"

    def test_non_list_body(self, client, session):
        session.get.return_value = make_response(200, {"expenses": []})

        with pytest.raises(RemoteError, match="Expected a list"):
            asyncio.run(client.fetch_all())

    def test_non_json_body(self, client, session):
        session.get.return_value = make_response(200, text="<html></html>")

        with pytest.raises(RemoteError, match="non-JSON"):
            asyncio.run(client.fetch_all())

    def test_malformed_record(self, client, session):
        session.get.return_value = make_response(200, [{"id": "e1", "title": "Rent"}])

        with pytest.raises(RemoteError, match="Malformed expense record"):
            asyncio.run(client.fetch_all())

    def test_retries_connection_errors(self, client, session, no_retry_wait):
        session.get.side_effect = [
            requests.ConnectionError("refused"),
            make_response(200, []),
        ]

        assert asyncio.run(client.fetch_all()) == []
        assert session.get.call_count == 2

    def test_gives_up_after_three_attempts(self, client, session, no_retry_wait):
        session.get.side_effect = requests.Timeout("slow")

        with pytest.raises(RemoteError) as exc_info:
            asyncio.run(client.fetch_all())

        assert exc_info.value.status_code is None
        assert session.get.call_count == 3


class TestMutations:
    """Tests for create and delete."""

    def test_create_posts_payload(self, client, session):
        session.post.return_value = make_response(201, {
            "id": 17, "title": "Fuel", "amount": 40.5, "date": "2024-05-01",
        })
        draft = ExpenseDraft(title="Fuel", amount="40.50", date="2024-05-01")

        created = asyncio.run(client.create(draft))

        assert created.id == "17"
        assert created.amount == Decimal("40.5")
        session.post.assert_called_once_with(
            BASE_URL,
            json={"title": "Fuel", "amount": 40.5, "date": "2024-05-01"},
            timeout=5,
        )

    def test_create_is_not_retried(self, client, session):
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(RemoteError, match="Failed to save expense"):
            asyncio.run(client.create(ExpenseDraft(title="Fuel", amount=1, date="2024-05-01")))

        assert session.post.call_count == 1

    def test_delete_targets_item_url(self, client, session):
        session.delete.return_value = make_response(200, {})

        assert asyncio.run(client.delete("e 1")) is True
        session.delete.assert_called_once_with(BASE_URL + "/e%201", timeout=5)

    def test_delete_failure(self, client, session):
        session.delete.return_value = make_response(404, {"error": "Not Found"})

        with pytest.raises(RemoteError) as exc_info:
            asyncio.run(client.delete("e1"))

        assert exc_info.value.message == "Not Found"
        assert exc_info.value.status_code == 404


def test_defaults_come_from_settings(monkeypatch):
    from expense_tracker.config import get_settings

    monkeypatch.setenv("EXPENSES_API_BASE_URL", "https://example.test/api/expenses/")
    monkeypatch.setenv("EXPENSES_API_TIMEOUT_SECONDS", "3")
    get_settings.cache_clear()
    try:
        client = HttpExpenseCollection(session=MagicMock())
        assert client.base_url == "https://example.test/api/expenses"
    finally:
        get_settings.cache_clear()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
