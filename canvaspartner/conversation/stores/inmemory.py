"""In-memory implementations of SessionStore and MessageStore."""

from typing import Any
from uuid import UUID

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.conversation.models import Message, MessageRole, Session
from canvaspartner.conversation.models.session import utc_now
from canvaspartner.conversation.store import MessageStore, SessionStore


class InMemorySessionStore(SessionStore):
    """In-memory implementation of SessionStore for testing and development.

    Uses simple dict storage with linear scan for queries.
    Not suitable for production use.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    async def get(self, session_id: str) -> Session | None:
        session = self._sessions.get(session_id)
        return session.model_copy() if session else None

    async def create(self, session_id: str, user_id: str, title: str) -> Session:
        session = Session(session_id=session_id, user_id=user_id, title=title)
        self._sessions[session_id] = session
        return session.model_copy()

    async def touch(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.updated_at = utc_now()

    async def set_active_canvas(self, session_id: str, canvas_id: UUID | None) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.active_canvas_id = canvas_id

    async def list_by_user(self, user_id: str, *, limit: int = 100) -> list[Session]:
        results = [s for s in self._sessions.values() if s.user_id == user_id]
        # Most recently active first
        results.sort(key=lambda s: s.updated_at, reverse=True)
        return [s.model_copy() for s in results[:limit]]

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None


class InMemoryMessageStore(MessageStore):
    """In-memory implementation of MessageStore for testing and development."""

    def __init__(self) -> None:
        self._messages: dict[str, list[Message]] = {}

    async def append(
        self,
        session_id: str,
        role: MessageRole,
        content: str,
        *,
        tool_calls: list[dict[str, Any]] | None = None,
        tool_call_id: str | None = None,
        location: GeoPoint | None = None,
    ) -> Message:
        message = Message(
            session_id=session_id,
            role=role,
            content=content,
            tool_calls=tool_calls,
            tool_call_id=tool_call_id,
            location=location,
        )
        self._messages.setdefault(session_id, []).append(message)
        return message

    async def list_by_session(self, session_id: str) -> list[Message]:
        return [m.model_copy(deep=True) for m in self._messages.get(session_id, [])]

    async def delete_by_session(self, session_id: str) -> int:
        return len(self._messages.pop(session_id, []))
