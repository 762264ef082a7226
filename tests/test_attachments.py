"""Unit tests for attachment loading and inlining."""
import base64

import pytest

from omnichat.attachments import inline_attachments, load_attachment, render_attachment
from omnichat.exceptions import AttachmentTooLargeError
from omnichat.sessions import Attachment, AttachmentType, Message, Role

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


class TestLoadAttachment:
    """Tests for load_attachment."""

    def test_text_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("line one\nline two", encoding="utf-8")

        attachment = load_attachment(path)

        assert attachment.name == "notes.txt"
        assert attachment.type == AttachmentType.FILE
        assert attachment.content == "line one\nline two"
        assert attachment.mime_type == "text/plain"

    def test_image_becomes_data_url(self, tmp_path):
        path = tmp_path / "pic.png"
        path.write_bytes(PNG_BYTES)

        attachment = load_attachment(str(path))

        assert attachment.type == AttachmentType.IMAGE
        assert attachment.mime_type == "image/png"
        assert attachment.content == "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

    def test_undecodable_bytes_are_replaced(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"ok\xff\xfe")

        attachment = load_attachment(path)

        assert attachment.type == AttachmentType.FILE
        assert attachment.content.startswith("ok")
        assert "�" in attachment.content

    def test_too_large(self, tmp_path):
        path = tmp_path / "big.txt"
        path.write_text("x" * 11)

        with pytest.raises(AttachmentTooLargeError, match="big.txt is too large"):
            load_attachment(path, max_size_bytes=10)

    def test_too_large_is_value_error(self, tmp_path):
        path = tmp_path / "big.txt"
        path.write_text("x" * 11)

        with pytest.raises(ValueError):
            load_attachment(path, max_size_bytes=10)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_attachment(tmp_path / "absent.txt")


class TestInlineAttachments:
    """Tests for rendering attachments into outbound content."""

    def test_render_file(self):
        attachment = Attachment(name="a.py", type=AttachmentType.FILE, content="print(1)")
        assert render_attachment(attachment) == "File: a.py\n```\nprint(1)\n```"

    def test_render_image(self):
        attachment = Attachment(name="p.png", type=AttachmentType.IMAGE, content="data:image/png;base64,AA==")
        assert render_attachment(attachment) == "![p.png](data:image/png;base64,AA==)"

    def test_message_without_attachments_is_unchanged(self):
        message = Message(role=Role.USER, content="plain")
        assert inline_attachments(message) is message

    def test_inlined_copy(self):
        attachment = Attachment(name="a.txt", type=AttachmentType.FILE, content="body")
        message = Message(role=Role.USER, content="Look", attachments=[attachment])

        inlined = inline_attachments(message)

        assert inlined.content == "Look\n\nFile: a.txt\n```\nbody\n```"
        assert inlined.attachments == []
        assert inlined.id == message.id
        assert message.attachments == [attachment]

    def test_attachment_only_message(self):
        attachment = Attachment(name="a.txt", type=AttachmentType.FILE, content="body")
        inlined = inline_attachments(Message(role=Role.USER, content="", attachments=[attachment]))

        assert inlined.content == "File: a.txt\n```\nbody\n```"
