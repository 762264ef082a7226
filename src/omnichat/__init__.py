"""
Omnichat: a local-first chat client for OpenAI-compatible LLM endpoints.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision:
- llm: how each provider is addressed, authenticated and streamed
- storage: where durable documents live
- sessions: how conversations are modeled and persisted
- settings: connection settings and per-endpoint keys
- controller: how a user send becomes a streamed, persisted turn
"""

__version__ = "0.1.0"

from .controller import ConversationController, ConversationState
from .exceptions import (
    ConfigurationError,
    NetworkError,
    OmnichatError,
    ProtocolError,
    ProviderError,
)
from .llm import ProviderAdapter
from .sessions import Attachment, ChatSession, Message, Role, SessionStore
from .settings import AppSettings, SettingsStore
from .storage import create_storage

__all__ = [
    "AppSettings",
    "Attachment",
    "ChatSession",
    "ConfigurationError",
    "ConversationController",
    "ConversationState",
    "Message",
    "NetworkError",
    "OmnichatError",
    "ProtocolError",
    "ProviderAdapter",
    "ProviderError",
    "Role",
    "SessionStore",
    "SettingsStore",
    "create_storage",
]
