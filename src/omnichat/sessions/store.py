"""Session persistence on top of key-value storage.

The whole session collection is stored as one JSON array under a fixed key
and rewritten in full on every change.
"""

import logging
from collections.abc import Sequence

from pydantic import TypeAdapter, ValidationError

from ..storage import KeyValueStorage
from .models import DEFAULT_SESSION_TITLE, ChatSession, generate_id, now_ms

logger = logging.getLogger(__name__)

SESSIONS_KEY = "sessions"

_sessions_adapter = TypeAdapter(list[ChatSession])


class SessionStore:
    """Create, list, upsert and delete chat sessions.

    All operations are synchronous and read the collection fresh from
    storage, so several stores over the same storage stay consistent.
    """

    def __init__(self, storage: KeyValueStorage, key: str = SESSIONS_KEY):
        self._storage = storage
        self._key = key

    def list(self) -> list[ChatSession]:
        """Return all sessions, most recently updated first.

        Unreadable or corrupt storage yields an empty list.
        """
        try:
            raw = self._storage.get(self._key)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read sessions: %s", e)
            return []
        if not raw:
            return []
        try:
            sessions = _sessions_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable session data: %s", e.errors()[0]["msg"])
            return []
        return sorted(sessions, key=lambda s: s.updated_at, reverse=True)

    def get(self, session_id: str) -> ChatSession | None:
        """Return the session with ``session_id``, or None."""
        for session in self.list():
            if session.id == session_id:
                return session
        return None

    def save(self, session: ChatSession) -> None:
        """Insert or replace ``session`` by id and persist the collection."""
        sessions = self.list()
        for index, existing in enumerate(sessions):
            if existing.id == session.id:
                sessions[index] = session
                break
        else:
            sessions.insert(0, session)
        self._write(sessions)

    def delete(self, session_id: str) -> None:
        """Remove the session with ``session_id``. Unknown ids are a no-op."""
        sessions = self.list()
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) == len(sessions):
            return
        self._write(remaining)

    def create(self, initial_model: str | None = None) -> ChatSession:
        """Build a new empty session. The caller decides when to persist it."""
        now = now_ms()
        return ChatSession(
            id=generate_id(),
            title=DEFAULT_SESSION_TITLE,
            messages=[],
            created_at=now,
            updated_at=now,
            model_used=initial_model,
        )

    def _write(self, sessions: Sequence[ChatSession]) -> None:
        payload = _sessions_adapter.dump_json(sessions, by_alias=True)
        self._storage.set(self._key, payload.decode("utf-8"))
