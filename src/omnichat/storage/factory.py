"""Factory for creating storage backends."""

from typing import Any

from .base import KeyValueStorage


def create_storage(backend: str = "file", **config: Any) -> KeyValueStorage:
    """Create a key-value storage backend.

    Args:
        backend: Backend type ("file" or "memory")
        **config: Backend-specific configuration
            For file:
                - directory: str | Path (required)
            For memory:
                - initial: dict[str, str] | None

    Returns:
        KeyValueStorage instance

    Raises:
        ValueError: If backend type is not supported
        TypeError: If required configuration is missing

    Example:
        >>> storage = create_storage("file", directory="~/.omnichat")
        >>> storage.set("settings", "{}")
    """
    backend_lower = backend.lower()

    if backend_lower == "file":
        if "directory" not in config:
            raise TypeError("File storage requires 'directory' in config")
        from .file import FileStorage
        return FileStorage(**config)

    if backend_lower == "memory":
        from .in_memory import InMemoryStorage
        return InMemoryStorage(**config)

    raise ValueError(
        f"Unsupported storage backend: {backend}. "
        f"Supported backends: file, memory"
    )
