"""Loading user files as attachments and inlining them for transmission."""

import base64
import mimetypes
from pathlib import Path

from .exceptions import AttachmentTooLargeError
from .sessions.models import Attachment, AttachmentType, Message

MAX_ATTACHMENT_BYTES = 5 * 1024 * 1024


def load_attachment(path: str | Path, max_size_bytes: int = MAX_ATTACHMENT_BYTES) -> Attachment:
    """Read a file into an Attachment.

    Images become base64 data URLs; anything else is read as UTF-8 text
    with undecodable bytes replaced.

    Args:
        path: File to attach
        max_size_bytes: Size limit

    Returns:
        Attachment owning the file content

    Raises:
        AttachmentTooLargeError: If the file exceeds ``max_size_bytes``
        OSError: If the file cannot be read
    """
    file_path = Path(path).expanduser()
    size = file_path.stat().st_size
    if size > max_size_bytes:
        raise AttachmentTooLargeError(
            f"File {file_path.name} is too large (max {max_size_bytes // (1024 * 1024)}MB)"
        )

    mime_type, _ = mimetypes.guess_type(file_path.name)
    data = file_path.read_bytes()

    if mime_type and mime_type.startswith("image/"):
        encoded = base64.b64encode(data).decode("ascii")
        return Attachment(
            name=file_path.name,
            type=AttachmentType.IMAGE,
            content=f"data:{mime_type};base64,{encoded}",
            mime_type=mime_type,
        )

    return Attachment(
        name=file_path.name,
        type=AttachmentType.FILE,
        content=data.decode("utf-8", errors="replace"),
        mime_type=mime_type,
    )


def render_attachment(attachment: Attachment) -> str:
    """Render one attachment as markdown prose."""
    if attachment.type == AttachmentType.IMAGE:
        return f"![{attachment.name}]({attachment.content})"
    return f"File: {attachment.name}\n```\n{attachment.content}\n```"


def inline_attachments(message: Message) -> Message:
    """Return a copy of ``message`` with its attachments folded into the content.

    The stored message keeps its attachments separate; only outbound copies
    are inlined.
    """
    if not message.attachments:
        return message
    parts = [message.content] if message.content else []
    parts.extend(render_attachment(a) for a in message.attachments)
    return message.model_copy(update={"content": "\n\n".join(parts), "attachments": []})
