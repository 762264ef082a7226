"""Durable local storage for omnichat."""

from .base import KeyValueStorage
from .factory import create_storage
from .file import FileStorage
from .in_memory import InMemoryStorage

__all__ = [
    "KeyValueStorage",
    "create_storage",
    "FileStorage",
    "InMemoryStorage",
]
