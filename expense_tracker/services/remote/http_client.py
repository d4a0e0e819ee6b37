"""
REST Client for the Remote Expense Collection

Talks to a json-server style resource:
    GET    {base_url}        -> [ {id, title, amount, date}, ... ]
    POST   {base_url}        -> {id, title, amount, date}
    DELETE {base_url}/{id}   -> 2xx on success

DESIGN DECISION: requests is blocking, so each call runs in a worker
thread (asyncio.to_thread) and the event loop driving the UI stays free.

Only the fetch is retried on connection failures and timeouts.
Create and delete are not idempotent; retrying them could add an
expense twice.
"""

import asyncio
from typing import Any, Optional
from urllib.parse import quote

import requests
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.config import get_settings
from expense_tracker.models.expense import Expense, ExpenseDraft
from expense_tracker.services.remote.interface import (
    ExpenseCollectionInterface,
    RemoteError,
)


def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def _error_message(response: requests.Response, default: str) -> str:
    """
    Pull the server's explanation out of a failed response.

    Prefers a JSON message/error/detail field, then the raw body text.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

    text = (response.text or "").strip()
    if text:
        return text
    return f"{default} (HTTP {response.status_code})"


class HttpExpenseCollection(ExpenseCollectionInterface):
    """
    ExpenseCollectionInterface over HTTP.

    A requests.Session is reused for connection pooling; pass one in
    to control headers, auth or adapters (and to mock transport in tests).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        if base_url is None or timeout_seconds is None:
            remote_settings = get_settings().remote
            base_url = base_url or remote_settings.base_url
            timeout_seconds = timeout_seconds or remote_settings.timeout_seconds

        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")

    @property
    def base_url(self) -> str:
        return self._base_url

    def _item_url(self, expense_id: str) -> str:
        return f"{self._base_url}/{quote(str(expense_id), safe='')}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        reraise=True,
    )
    def _get_all(self) -> requests.Response:
        return self._session.get(self._base_url, timeout=self._timeout)

    def _post(self, payload: dict) -> requests.Response:
        return self._session.post(self._base_url, json=payload, timeout=self._timeout)

    def _delete(self, expense_id: str) -> requests.Response:
        return self._session.delete(self._item_url(expense_id), timeout=self._timeout)

    async def _send(self, default_message: str, call, *args) -> requests.Response:
        """Run a blocking request off the loop and translate its failures."""
        try:
            response = await asyncio.to_thread(call, *args)
        except requests.RequestException as e:
            raise RemoteError(f"{default_message}: {e}")

        if not _is_success(response):
            raise RemoteError(
                _error_message(response, default_message),
                status_code=response.status_code,
            )
        return response

    def _parse_expense(self, data: Any, status_code: int) -> Expense:
        try:
            return Expense.model_validate(data)
        except PydanticValidationError as e:
            raise RemoteError(
                f"Malformed expense record from server: {e.error_count()} error(s)",
                status_code=status_code,
            )

    def _json_body(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            raise RemoteError(
                "Server returned a non-JSON body",
                status_code=response.status_code,
            )

    async def fetch_all(self) -> list[Expense]:
        response = await self._send("Failed to fetch expenses", self._get_all)
        body = self._json_body(response)

        if not isinstance(body, list):
            raise RemoteError(
                f"Expected a list of expenses, got {type(body).__name__}",
                status_code=response.status_code,
            )
        return [self._parse_expense(item, response.status_code) for item in body]

    async def create(self, draft: ExpenseDraft) -> Expense:
        response = await self._send(
            "Failed to save expense", self._post, draft.to_payload()
        )
        return self._parse_expense(self._json_body(response), response.status_code)

    async def delete(self, expense_id: str) -> bool:
        await self._send("Failed to delete expense", self._delete, expense_id)
        return True
