"""Tool data models.

Defines the closed set of tools the model may call, the result envelope
written back into the conversation, and the per-turn context handlers see.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from canvaspartner.canvas.models import GeoPoint


class ToolName(str, Enum):
    """Every tool the model can call."""

    CREATE_CANVAS = "create_canvas"
    UPDATE_CANVAS = "update_canvas"
    GET_USER_LOCATION = "get_user_location"
    SEARCH_WEB = "search_web"


class ToolStatus(str, Enum):
    """Outcome classes reported back to the model."""

    SUCCESS = "success"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    PARTIAL_ERROR = "partial_error"


class ToolResult(BaseModel):
    """Result of one tool call, serialized as the tool message content."""

    status: ToolStatus = Field(..., description="Outcome class")
    message: str | None = Field(default=None, description="Human-readable outcome")
    canvas_id: UUID | None = Field(default=None, description="Canvas written or found")
    system_note: str | None = Field(default=None, description="Guidance for the model")
    errors: list[str] = Field(default_factory=list, description="Per-item problems")
    data: dict[str, Any] | None = Field(default=None, description="Tool-specific payload")

    @property
    def success(self) -> bool:
        return self.status in (ToolStatus.SUCCESS, ToolStatus.PARTIAL_ERROR)

    @classmethod
    def failed(cls, message: str, *, errors: list[str] | None = None) -> "ToolResult":
        return cls(status=ToolStatus.FAILED, message=message, errors=errors or [])

    def to_content(self) -> str:
        """JSON text stored as the tool message content."""
        return self.model_dump_json(exclude_none=True)


class ToolContext(BaseModel):
    """Request-derived data available to tool handlers.

    active_canvas_id is advanced by the round executor after every
    successful canvas mutation, so later calls of the same round see it.
    """

    model_config = ConfigDict(validate_assignment=True)

    user_id: str
    session_id: str
    location: GeoPoint | None = None
    active_canvas_id: UUID | None = None


ToolHandler = Callable[[Any, ToolContext], Awaitable[ToolResult]]


@dataclass(frozen=True)
class ToolSpec:
    """Registration entry binding a tool name to its schema and handler."""

    name: ToolName
    description: str
    input_model: type[BaseModel]
    handler: ToolHandler
    mutates_canvas: bool = False
