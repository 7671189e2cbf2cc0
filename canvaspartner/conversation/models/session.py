"""Session and message models for conversation domain."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.conversation.models.enums import MessageRole


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Session(BaseModel):
    """A chat session between one user and the planning partner.

    active_canvas_id is the canvas tool calls in this session operate on.
    It is written after every successful canvas mutation so the next turn
    can resume without re-reading tool output.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    session_id: str = Field(..., min_length=1, description="Client-supplied identifier")
    user_id: str = Field(..., description="Owning user")
    title: str = Field(default="", description="First characters of the opening message")
    active_canvas_id: UUID | None = Field(
        default=None, description="Canvas the session is working on"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last activity")

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id


class Message(BaseModel):
    """One row of a session's append-only message log.

    tool_calls holds the raw call descriptors the model emitted, in the
    shape the model API uses. Rows are replayed through history
    reconstruction, which tolerates malformed descriptors.
    """

    model_config = ConfigDict(frozen=False)

    message_id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    session_id: str = Field(..., description="Owning session")
    role: MessageRole = Field(..., description="Message author")
    content: str = Field(default="", description="Text content")
    tool_calls: list[Any] | None = Field(
        default=None, description="Tool calls requested by an assistant message"
    )
    tool_call_id: str | None = Field(
        default=None, description="Call a tool message answers"
    )
    location: GeoPoint | None = Field(
        default=None, description="Coordinates attached to a user message"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
