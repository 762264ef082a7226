"""Data models for chat sessions.

Field names are snake_case in Python and camelCase in persisted JSON
(``createdAt``, ``mimeType``, ...), so stored documents keep one stable shape.
"""

import time
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_SESSION_TITLE = "New Project"
TITLE_MAX_LENGTH = 30


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid4().hex


def derive_title(content: str) -> str:
    """Build a session title from the first user message.

    Args:
        content: Text of the first user message

    Returns:
        The leading characters of the message, with an ellipsis when truncated
    """
    if len(content) > TITLE_MAX_LENGTH:
        return content[:TITLE_MAX_LENGTH] + "..."
    return content


class Role(str, Enum):
    """Author of a message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class AttachmentType(str, Enum):
    """Kind of attachment payload."""

    IMAGE = "image"  # content is a data URL
    FILE = "file"    # content is decoded text


class Attachment(BaseModel):
    """A user-selected file attached to a message."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = Field(description="Original file name")
    type: AttachmentType = Field(description="Image or text file")
    content: str = Field(description="Data URL for images, raw text for files")
    mime_type: str | None = Field(default=None, description="MIME type when known")


class Message(BaseModel):
    """A single message in a conversation."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=generate_id)
    role: Role
    content: str = ""
    attachments: list[Attachment] = Field(default_factory=list)
    timestamp: int = Field(default_factory=now_ms, description="Epoch milliseconds")


class ChatSession(BaseModel):
    """One persisted conversation thread."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    id: str = Field(default_factory=generate_id)
    title: str = DEFAULT_SESSION_TITLE
    messages: list[Message] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)
    model_used: str | None = None

    def replace_message(self, message: Message) -> "ChatSession":
        """Return a copy with the message of the same id swapped for ``message``."""
        messages = [message if m.id == message.id else m for m in self.messages]
        return self.model_copy(update={"messages": messages})

    def touched(self) -> "ChatSession":
        """Return a copy whose ``updated_at`` is now, never moving backwards."""
        return self.model_copy(update={"updated_at": max(now_ms(), self.updated_at)})
