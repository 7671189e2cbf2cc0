"""Session listing and message history response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.conversation.models import Message, Session


class SessionSummary(BaseModel):
    """One entry of the session list."""

    session_id: str
    title: str
    active_canvas_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SessionSummary":
        return cls(
            session_id=session.session_id,
            title=session.title,
            active_canvas_id=session.active_canvas_id,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )


class SessionListResponse(BaseModel):
    sessions: list[SessionSummary] = Field(default_factory=list)


class MessageView(BaseModel):
    """A message as shown to the user."""

    message_id: UUID
    role: str
    content: str
    location: GeoPoint | None = None
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageView":
        return cls(
            message_id=message.message_id,
            role=message.role.value,
            content=message.content,
            location=message.location,
            created_at=message.created_at,
        )


class MessageListResponse(BaseModel):
    session_id: str
    messages: list[MessageView] = Field(default_factory=list)
