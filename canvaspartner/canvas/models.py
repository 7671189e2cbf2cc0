"""Business Model Canvas domain models."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from canvaspartner.canvas.tags import CanvasTag, normalize_tag


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class GeoPoint(BaseModel):
    """Latitude/longitude pair shared by the user."""

    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lon: float = Field(..., ge=-180, le=180, description="Longitude")


class CanvasBlock(BaseModel):
    """One entry of a canvas, filed under a building block."""

    model_config = ConfigDict(frozen=True)

    tag: CanvasTag = Field(..., description="Building block the entry belongs to")
    content: str = Field(..., min_length=1, description="Entry text")

    @field_validator("tag", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        return normalize_tag(value)


class Canvas(BaseModel):
    """A persisted Business Model Canvas owned by one user."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    canvas_id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    owner_id: str = Field(..., description="Owning user")
    session_id: str | None = Field(
        default=None, description="Chat session the canvas was created in"
    )
    blocks: list[CanvasBlock] = Field(default_factory=list, description="Canvas entries")
    location: GeoPoint | None = Field(default=None, description="Where it was created")
    is_public: bool = Field(default=False, description="Listed in the public gallery")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last modification")

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == user_id

    def blocks_by_tag(self) -> dict[CanvasTag, list[str]]:
        """Group entry contents by building block, in canonical tag order."""
        grouped: dict[CanvasTag, list[str]] = {}
        for tag in CanvasTag:
            contents = [block.content for block in self.blocks if block.tag == tag]
            if contents:
                grouped[tag] = contents
        return grouped
