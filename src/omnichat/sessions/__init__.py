"""Chat session models and persistence."""

from .models import (
    DEFAULT_SESSION_TITLE,
    Attachment,
    AttachmentType,
    ChatSession,
    Message,
    Role,
    derive_title,
    generate_id,
    now_ms,
)
from .store import SESSIONS_KEY, SessionStore

__all__ = [
    "DEFAULT_SESSION_TITLE",
    "SESSIONS_KEY",
    "Attachment",
    "AttachmentType",
    "ChatSession",
    "Message",
    "Role",
    "SessionStore",
    "derive_title",
    "generate_id",
    "now_ms",
]
