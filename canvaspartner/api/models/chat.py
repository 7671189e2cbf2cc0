"""Chat request and stream event models."""

from pydantic import BaseModel, Field

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.orchestration.models import DoneEvent, ErrorEvent, TokenEvent


class ChatRequest(BaseModel):
    """One user message sent to a session.

    The session is created on first use; later messages with the same
    session_id continue it.
    """

    session_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Client-chosen session identifier",
    )
    message: str = Field(..., min_length=1, description="User message text")
    location: GeoPoint | None = Field(
        default=None, description="Coordinates shared by the user's device"
    )


__all__ = ["ChatRequest", "DoneEvent", "ErrorEvent", "TokenEvent"]
