"""In-memory storage backend.

Simple dict-based storage for throwaway sessions and tests.
Data is lost when the application exits.
"""

from .base import KeyValueStorage


class InMemoryStorage(KeyValueStorage):
    """Dict-backed storage (process lifetime only)."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self.write_count = 0

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.write_count += 1

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    @property
    def backend_type(self) -> str:
        return "memory"
