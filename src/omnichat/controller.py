"""Conversation controller.

Owns the in-memory view of all sessions, turns user sends into adapter
calls, applies streamed deltas to the assistant message, and commits the
result through the session store. This is the only surface the
presentation layer talks to.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from .attachments import inline_attachments
from .exceptions import SessionNotFoundError
from .llm import ProviderAdapter, check_configuration
from .sessions import Attachment, ChatSession, Message, Role, SessionStore, derive_title
from .settings import AppSettings, SettingsStore, apply_settings_change

logger = logging.getLogger(__name__)

ERROR_TEMPLATE = "**Connection Error**\n\n{message}\n\n*Check your API Key and Model settings.*"

SessionListener = Callable[[ChatSession], None]


class ConversationState(str, Enum):
    """Per-session send lifecycle."""

    IDLE = "idle"
    SENDING = "sending"      # user message committed, waiting for first delta
    STREAMING = "streaming"  # deltas arriving


def format_error(error: Exception) -> str:
    """Render a failure as assistant message content."""
    return ERROR_TEMPLATE.format(message=str(error) or type(error).__name__)


class ConversationController:
    """Coordinates sessions, settings and the provider adapter.

    Each session has its own state machine, so one session can stream while
    another is edited or sent to. A stream always writes into the session
    it was started for, whichever session is currently selected.

    Args:
        session_store: Durable session collection
        settings_store: Durable settings document
        adapter: Provider adapter used for every send
        listener: Called with the updated session after every change,
            including every streamed delta
        settings: Settings to start with instead of the stored ones; they
            are only persisted once changed through update_settings
    """

    def __init__(
        self,
        session_store: SessionStore,
        settings_store: SettingsStore,
        adapter: ProviderAdapter,
        listener: SessionListener | None = None,
        settings: AppSettings | None = None,
    ):
        self._store = session_store
        self._settings_store = settings_store
        self._adapter = adapter
        self._listener = listener

        self._settings = settings if settings is not None else settings_store.load()
        self._sessions: list[ChatSession] = session_store.list()
        self._states: dict[str, ConversationState] = {}
        self._tasks: dict[str, asyncio.Task[Any]] = {}

        if self._sessions:
            self._current_id = self._sessions[0].id
        else:
            self._current_id = self.create_session().id

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def sessions(self) -> list[ChatSession]:
        """All known sessions, most recently updated first."""
        return sorted(self._sessions, key=lambda s: s.updated_at, reverse=True)

    @property
    def current_session(self) -> ChatSession:
        return self.get_session(self._current_id)

    def get_session(self, session_id: str) -> ChatSession:
        """Return the in-memory session with ``session_id``.

        Raises:
            SessionNotFoundError: If no such session exists
        """
        session = self._find(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return session

    def state(self, session_id: str) -> ConversationState:
        return self._states.get(session_id, ConversationState.IDLE)

    def is_loading(self, session_id: str | None = None) -> bool:
        """True while a send is in flight for the session (default: current)."""
        return self.state(session_id or self._current_id) is not ConversationState.IDLE

    def create_session(self) -> ChatSession:
        """Start a new empty conversation and select it.

        The session is not persisted until its first message is sent.
        """
        session = self._store.create(self._settings.model)
        self._sessions.insert(0, session)
        self._current_id = session.id
        self._notify(session)
        return session

    def select_session(self, session_id: str) -> ChatSession:
        """Make ``session_id`` the current session.

        An in-flight stream in the previously selected session keeps running.
        """
        session = self.get_session(session_id)
        self._current_id = session_id
        return session

    def delete_session(self, session_id: str) -> None:
        """Delete a session; the current one falls back to the most recent."""
        self._store.delete(session_id)
        self._sessions = [s for s in self._sessions if s.id != session_id]
        self._states.pop(session_id, None)

        if self._current_id == session_id:
            remaining = self.sessions
            if remaining:
                self._current_id = remaining[0].id
            else:
                self.create_session()

    def update_settings(self, **changes: Any) -> AppSettings:
        """Apply and persist a settings change.

        Streams already in flight keep the settings they started with.

        Raises:
            ValueError: If a field is unknown or a value is invalid
        """
        self._settings = apply_settings_change(self._settings, **changes)
        self._settings_store.save(self._settings)
        return self._settings

    def cancel(self, session_id: str | None = None) -> bool:
        """Cancel the in-flight send of a session (default: current).

        The partial response is kept and persisted.

        Returns:
            True if a send was cancelled
        """
        task = self._tasks.get(session_id or self._current_id)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def send_message(
        self,
        text: str,
        attachments: Sequence[Attachment] = (),
    ) -> ChatSession | None:
        """Send a user message in the current session and stream the reply.

        Does nothing when there is neither text nor attachments, or when the
        session already has a send in flight. Provider failures end up as
        the assistant message content.

        Args:
            text: User input
            attachments: Files attached to the message

        Returns:
            The final session, or None if nothing was sent

        Raises:
            ConfigurationError: If settings cannot address an endpoint;
                nothing is appended in that case
        """
        session = self.current_session
        content = text.strip()
        if (not content and not attachments) or self.is_loading(session.id):
            return None

        settings = self._settings
        check_configuration(settings)

        session_id = session.id
        self._states[session_id] = ConversationState.SENDING

        user_message = Message(role=Role.USER, content=content, attachments=list(attachments))
        updates: dict[str, Any] = {"messages": [*session.messages, user_message]}
        if not session.messages and content:
            updates["title"] = derive_title(content)
        session = session.model_copy(update=updates).touched()
        try:
            self._persist(session)
        except Exception:
            self._states.pop(session_id, None)
            raise

        outbound = [inline_attachments(m) for m in session.messages]
        placeholder = Message(role=Role.ASSISTANT, content="")
        self._apply(session.model_copy(update={"messages": [*session.messages, placeholder]}))

        current_task = asyncio.current_task()
        if current_task is not None:
            self._tasks[session_id] = current_task

        accumulated = ""
        try:
            stream = await self._adapter.open_stream(outbound, settings)
            async for delta in stream:
                self._states[session_id] = ConversationState.STREAMING
                accumulated += delta
                self._set_content(session_id, placeholder, accumulated)
        except asyncio.CancelledError:
            logger.info("Response cancelled for session %s", session_id)
            self._finish(session_id)
            raise
        except Exception as e:
            logger.error("Response failed for session %s: %s", session_id, e)
            self._set_content(session_id, placeholder, format_error(e))
            return self._finish(session_id)
        finally:
            self._tasks.pop(session_id, None)
            # Idle again even when a listener raised
            self._states.pop(session_id, None)

        return self._finish(session_id)

    def _find(self, session_id: str) -> ChatSession | None:
        for session in self._sessions:
            if session.id == session_id:
                return session
        return None

    def _apply(self, session: ChatSession) -> None:
        """Replace the in-memory copy of ``session`` and notify."""
        self._sessions = [session if s.id == session.id else s for s in self._sessions]
        self._notify(session)

    def _persist(self, session: ChatSession) -> None:
        self._store.save(session)
        self._apply(session)

    def _set_content(self, session_id: str, placeholder: Message, content: str) -> None:
        session = self._find(session_id)
        if session is None:
            return
        self._apply(session.replace_message(placeholder.model_copy(update={"content": content})))

    def _finish(self, session_id: str) -> ChatSession | None:
        self._states.pop(session_id, None)
        session = self._find(session_id)
        if session is None:
            # Deleted while streaming
            return None
        session = session.touched()
        self._persist(session)
        return session

    def _notify(self, session: ChatSession) -> None:
        if self._listener is not None:
            self._listener(session)
