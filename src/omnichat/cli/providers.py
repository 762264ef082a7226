"""Factory functions for CLI.

Centralizes creation of storage, stores, adapter and controller from
environment variables. Hides configuration details from command
implementations.
"""

import os
from pathlib import Path

from ..controller import ConversationController, SessionListener
from ..llm import ProviderAdapter
from ..sessions import SessionStore
from ..settings import AppSettings, SettingsStore, apply_settings_change
from ..storage import KeyValueStorage, create_storage

DEFAULT_HOME = Path.home() / ".omnichat"


def get_home() -> Path:
    """Return the data directory.

    Environment variables:
        OMNICHAT_HOME: Directory for sessions.json and settings.json
            (default: ~/.omnichat)
    """
    return Path(os.getenv("OMNICHAT_HOME", str(DEFAULT_HOME))).expanduser()


def get_storage() -> KeyValueStorage:
    """Create the storage backend from environment variables.

    Environment variables:
        OMNICHAT_STORAGE: Backend type (file, memory; default: file)
        OMNICHAT_HOME: Data directory for the file backend
    """
    backend = os.getenv("OMNICHAT_STORAGE", "file").lower()
    if backend == "memory":
        return create_storage("memory")
    return create_storage(backend, directory=get_home())


def apply_env_overrides(settings: AppSettings) -> AppSettings:
    """Overlay connection settings from the environment without persisting them.

    Environment variables:
        OMNICHAT_API_URL: Endpoint or base URL
        OMNICHAT_API_KEY: API key for the endpoint
        OMNICHAT_MODEL: Model identifier
    """
    changes = {}
    if os.getenv("OMNICHAT_API_URL"):
        changes["api_url"] = os.environ["OMNICHAT_API_URL"]
    if os.getenv("OMNICHAT_API_KEY"):
        changes["api_key"] = os.environ["OMNICHAT_API_KEY"]
    if os.getenv("OMNICHAT_MODEL"):
        changes["model"] = os.environ["OMNICHAT_MODEL"]
    if not changes:
        return settings
    return apply_settings_change(settings, **changes)


def get_stores(storage: KeyValueStorage | None = None) -> tuple[SessionStore, SettingsStore]:
    """Create session and settings stores over one storage backend."""
    storage = storage or get_storage()
    return SessionStore(storage), SettingsStore(storage)


def get_controller(
    adapter: ProviderAdapter,
    listener: SessionListener | None = None,
    storage: KeyValueStorage | None = None,
) -> ConversationController:
    """Create a controller with environment overrides applied to settings.

    Args:
        adapter: Provider adapter the controller streams through
        listener: Optional session update callback
        storage: Storage backend (default: from environment)

    Returns:
        Ready-to-use conversation controller
    """
    session_store, settings_store = get_stores(storage)
    settings = apply_env_overrides(settings_store.load())
    return ConversationController(
        session_store,
        settings_store,
        adapter,
        listener=listener,
        settings=settings,
    )


def get_adapter() -> ProviderAdapter:
    """Create the provider adapter used by CLI commands."""
    return ProviderAdapter()
