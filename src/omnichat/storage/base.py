"""Abstract base class for local key-value storage.

This module hides where durable state lives. Callers read and write whole
documents under fixed keys; there is no incremental patching.
"""

from abc import ABC, abstractmethod


class KeyValueStorage(ABC):
    """Durable string storage addressed by key.

    Implementations must make ``set`` replace the whole value in a single
    write, so a reader never observes a half-written document.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent.

        Raises:
            OSError: If the underlying medium cannot be read
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Removing a missing key is a no-op."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
