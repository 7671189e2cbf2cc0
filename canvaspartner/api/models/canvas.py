"""Canvas request and response models."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from canvaspartner.canvas.models import Canvas, CanvasBlock, GeoPoint


class CanvasWriteRequest(BaseModel):
    """Blocks sent by the client to create or replace a canvas.

    Items are validated one by one; any invalid item rejects the request.
    """

    blocks: list[Any] = Field(..., min_length=1, description="Items with tag and content")
    location: GeoPoint | None = None
    is_public: bool = False


class VisibilityRequest(BaseModel):
    is_public: bool


class CanvasResponse(BaseModel):
    canvas_id: UUID
    owner_id: str
    session_id: str | None = None
    blocks: list[CanvasBlock]
    location: GeoPoint | None = None
    is_public: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_canvas(cls, canvas: Canvas) -> "CanvasResponse":
        return cls(**canvas.model_dump())


class CanvasListResponse(BaseModel):
    canvases: list[CanvasResponse] = Field(default_factory=list)
