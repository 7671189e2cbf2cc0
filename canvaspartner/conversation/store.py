"""SessionStore and MessageStore abstract interfaces."""

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.conversation.models import Message, MessageRole, Session


class SessionStore(ABC):
    """Abstract interface for session storage.

    Sessions are keyed by the client-supplied session id. Ownership is
    checked by callers through Session.is_owned_by.
    """

    @abstractmethod
    async def get(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        pass

    @abstractmethod
    async def create(self, session_id: str, user_id: str, title: str) -> Session:
        """Create a session."""
        pass

    @abstractmethod
    async def touch(self, session_id: str) -> None:
        """Bump updated_at to now."""
        pass

    @abstractmethod
    async def set_active_canvas(self, session_id: str, canvas_id: UUID | None) -> None:
        """Record the canvas the session is working on."""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str, *, limit: int = 100) -> list[Session]:
        """List a user's sessions, most recently active first."""
        pass

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Delete a session."""
        pass


class MessageStore(ABC):
    """Abstract interface for the append-only message log."""

    @abstractmethod
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
        """Append a message to a session's log."""
        pass

    @abstractmethod
    async def list_by_session(self, session_id: str) -> list[Message]:
        """List a session's messages in creation order."""
        pass

    @abstractmethod
    async def delete_by_session(self, session_id: str) -> int:
        """Delete every message of a session, returning the count."""
        pass
