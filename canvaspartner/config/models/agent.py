"""Conversation loop configuration."""

from typing import Literal

from pydantic import BaseModel, Field


class DefaultLocationConfig(BaseModel):
    """Coordinates used when the user shared no location."""

    lat: float = Field(default=-6.212249928667231, ge=-90, le=90)
    lon: float = Field(default=106.79734681365301, ge=-180, le=180)


class AgentConfig(BaseModel):
    """Bounds and defaults for the tool-calling loop."""

    max_rounds: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Model invocations allowed per user turn",
    )
    tool_choice: Literal["auto", "required", "none"] = Field(
        default="auto",
        description="Tool choice hint passed to the model",
    )
    tool_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Per-tool execution timeout",
    )
    title_max_length: int = Field(
        default=50,
        gt=0,
        description="Characters of the first message used as session title",
    )
    max_message_length: int = Field(
        default=10000,
        gt=0,
        description="Longest accepted user message",
    )
    default_location: DefaultLocationConfig = Field(default_factory=DefaultLocationConfig)
    forced_finish_message: str = Field(
        default=(
            "Let's pause here for a moment. Tell me what you'd like to focus on "
            "next and we'll keep building your plan."
        ),
        description="Streamed when the round limit is hit with no text produced",
    )
