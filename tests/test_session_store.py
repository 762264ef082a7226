"""Unit tests for storage backends and the session store."""
import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from omnichat.sessions import (
    DEFAULT_SESSION_TITLE,
    SESSIONS_KEY,
    Attachment,
    AttachmentType,
    ChatSession,
    Message,
    Role,
    SessionStore,
    derive_title,
)
from omnichat.storage import FileStorage, InMemoryStorage, KeyValueStorage, create_storage


def _session(session_id: str, updated_at: int, **kwargs) -> ChatSession:
    return ChatSession(id=session_id, created_at=0, updated_at=updated_at, **kwargs)


class TestStorageFactory:
    """Tests for create_storage factory."""

    def test_storage_is_abstract(self):
        with pytest.raises(TypeError):
            KeyValueStorage()  # type: ignore

    def test_create_memory(self):
        storage = create_storage("memory")
        assert isinstance(storage, InMemoryStorage)
        assert storage.backend_type == "memory"

    def test_create_file(self, tmp_path):
        storage = create_storage("FILE", directory=tmp_path)
        assert isinstance(storage, FileStorage)
        assert storage.backend_type == "file"

    def test_file_requires_directory(self):
        with pytest.raises(TypeError, match="directory"):
            create_storage("file")

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unsupported storage backend"):
            create_storage("redis")


class TestFileStorage:
    """Tests for FileStorage."""

    def test_missing_key(self, tmp_path):
        assert FileStorage(tmp_path).get("sessions") is None

    def test_set_get_remove(self, tmp_path):
        storage = FileStorage(tmp_path / "nested")
        storage.set("settings", '{"a": 1}')

        assert storage.get("settings") == '{"a": 1}'
        assert (tmp_path / "nested" / "settings.json").exists()

        storage.remove("settings")
        assert storage.get("settings") is None
        storage.remove("settings")

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("sessions", "[]")
        storage.set("sessions", "[1]")

        assert storage.get("sessions") == "[1]"
        assert [p.name for p in tmp_path.iterdir()] == ["sessions.json"]

    def test_unsafe_key_stays_in_directory(self, tmp_path):
        storage = FileStorage(tmp_path)
        path = storage.path_for("../escape")
        assert path.parent == tmp_path


class TestSessionModels:
    """Tests for session data models."""

    def test_derive_short_title(self):
        assert derive_title("Hello") == "Hello"

    def test_derive_long_title(self):
        text = "Explain the difference between threads and processes"
        assert derive_title(text) == text[:30] + "..."

    @given(st.text())
    def test_title_length_bounded(self, text: str):
        """Property test: titles never exceed 30 characters plus ellipsis."""
        assert len(derive_title(text)) <= 33

    def test_camel_case_json(self):
        session = ChatSession(
            messages=[
                Message(
                    role=Role.USER,
                    content="see file",
                    attachments=[Attachment(name="a.txt", type=AttachmentType.FILE, content="x", mime_type="text/plain")],
                )
            ],
            model_used="gpt-4o",
        )
        data = json.loads(session.model_dump_json(by_alias=True))

        assert {"id", "title", "messages", "createdAt", "updatedAt", "modelUsed"} <= set(data)
        assert data["messages"][0]["attachments"][0]["mimeType"] == "text/plain"
        assert data["messages"][0]["role"] == "user"

    def test_touched_never_moves_backwards(self):
        future = 10**15
        session = _session("a", future)
        assert session.touched().updated_at == future

    def test_replace_message(self):
        message = Message(role=Role.ASSISTANT, content="")
        session = ChatSession(messages=[message])
        updated = session.replace_message(message.model_copy(update={"content": "done"}))

        assert updated.messages[0].content == "done"
        assert session.messages[0].content == ""


class TestSessionStore:
    """Tests for SessionStore."""

    def test_empty_storage(self, storage: InMemoryStorage):
        assert SessionStore(storage).list() == []

    def test_create_is_not_persisted(self, storage: InMemoryStorage):
        session = SessionStore(storage).create("gpt-4o")

        assert session.title == DEFAULT_SESSION_TITLE
        assert session.messages == []
        assert session.model_used == "gpt-4o"
        assert session.created_at == session.updated_at
        assert storage.get(SESSIONS_KEY) is None

    def test_save_then_get(self, storage: InMemoryStorage):
        store = SessionStore(storage)
        session = _session("a", 1, title="First")
        store.save(session)

        assert store.get("a") == session
        assert store.get("missing") is None

    def test_save_replaces_by_id(self, storage: InMemoryStorage):
        store = SessionStore(storage)
        store.save(_session("a", 1, title="Old"))
        store.save(_session("a", 2, title="New"))

        sessions = store.list()
        assert len(sessions) == 1
        assert sessions[0].title == "New"

    def test_list_sorted_by_updated_at(self, storage: InMemoryStorage):
        store = SessionStore(storage)
        store.save(_session("old", 100))
        store.save(_session("new", 300))
        store.save(_session("mid", 200))

        assert [s.id for s in store.list()] == ["new", "mid", "old"]

    def test_delete(self, storage: InMemoryStorage):
        store = SessionStore(storage)
        store.save(_session("a", 1))
        store.save(_session("b", 2))
        store.delete("a")

        assert [s.id for s in store.list()] == ["b"]

    def test_delete_unknown_id_does_not_write(self, storage: InMemoryStorage):
        store = SessionStore(storage)
        store.save(_session("a", 1))
        writes = storage.write_count

        store.delete("missing")

        assert storage.write_count == writes
        assert len(store.list()) == 1

    @pytest.mark.parametrize("raw", ["not json", '{"a": 1}', '[{"id": 5}]', ""])
    def test_corrupt_data_reads_as_empty(self, raw: str):
        store = SessionStore(InMemoryStorage({SESSIONS_KEY: raw}))
        assert store.list() == []

    def test_non_utf8_file_reads_as_empty(self, tmp_path):
        (tmp_path / "sessions.json").write_bytes(b"\xff\xfe[garbage")
        assert SessionStore(FileStorage(tmp_path)).list() == []

    def test_reads_camel_case_documents(self):
        raw = json.dumps([{
            "id": "s1",
            "title": "Hello",
            "messages": [{"id": "m1", "role": "user", "content": "Hello", "timestamp": 5}],
            "createdAt": 1,
            "updatedAt": 5,
            "modelUsed": "gpt-4o",
        }])
        session = SessionStore(InMemoryStorage({SESSIONS_KEY: raw})).get("s1")

        assert session is not None
        assert session.model_used == "gpt-4o"
        assert session.messages[0].role is Role.USER
        assert session.messages[0].attachments == []

    def test_file_round_trip_between_stores(self, tmp_path):
        """A second store over the same directory sees the first one's writes."""
        first = SessionStore(FileStorage(tmp_path))
        first.save(_session("a", 1, messages=[Message(role=Role.USER, content="Hi")]))

        second = SessionStore(FileStorage(tmp_path))
        assert second.get("a").messages[0].content == "Hi"
