"""In-memory slot storage, for tests and for sessions that opt out of persistence."""

from typing import Optional

from expense_tracker.services.storage.interface import KeyValueStorageInterface


class InMemoryStorage(KeyValueStorageInterface):

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._slots: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        self._slots[key] = value

    def remove(self, key: str) -> bool:
        return self._slots.pop(key, None) is not None
