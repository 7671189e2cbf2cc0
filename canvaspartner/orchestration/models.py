"""Orchestration models: loop states, loop events and turn events.

Loop events flow from StepLoop to the orchestrator. Turn events flow from
the orchestrator to the client and are what the chat endpoint streams.
"""

from enum import Enum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.conversation.models import Session
from canvaspartner.providers.llm.base import LLMMessage, ModelToolCall, TextDelta
from canvaspartner.tools.models import ToolResult


class LoopState(str, Enum):
    """Where the step loop is within the current round."""

    AWAITING_MODEL = "awaiting_model"
    HAS_TOOL_CALLS = "has_tool_calls"
    EXECUTING_TOOLS = "executing_tools"
    FINISHED = "finished"


class FinishReason(str, Enum):
    """Why the step loop stopped."""

    COMPLETED = "completed"
    ROUND_LIMIT = "round_limit"
    CANCELLED = "cancelled"


class RoundCompleted(BaseModel):
    """A model response with tool calls, and the results of running them."""

    type: Literal["round_completed"] = "round_completed"
    round_number: int = Field(..., ge=1)
    tool_calls: list[ModelToolCall] = Field(default_factory=list)
    results: list[ToolResult] = Field(default_factory=list)
    assistant_message: LLMMessage = Field(..., description="Replayable tool-call message")
    tool_messages: list[LLMMessage] = Field(
        default_factory=list, description="One tool message per call, in call order"
    )
    active_canvas_id: UUID | None = Field(
        default=None, description="Active canvas after the round's mutations"
    )


class LoopFinished(BaseModel):
    """Terminal loop event."""

    type: Literal["loop_finished"] = "loop_finished"
    rounds: int = Field(..., ge=0, description="Model invocations made")
    reason: FinishReason


LoopEvent = TextDelta | RoundCompleted | LoopFinished


class PreparedTurn(BaseModel):
    """A validated turn whose session exists and belongs to the user."""

    session: Session
    is_new_session: bool = False
    user_id: str
    message: str
    location: GeoPoint | None = None


class TokenEvent(BaseModel):
    """Streamed assistant text."""

    type: Literal["token"] = "token"
    content: str


class DoneEvent(BaseModel):
    """Sent once the turn completed and everything was persisted."""

    type: Literal["done"] = "done"
    session_id: str
    is_new_session: bool
    title: str = ""
    canvas_id: UUID | None = None
    rounds: int = 0
    finish_reason: FinishReason = FinishReason.COMPLETED


class ErrorEvent(BaseModel):
    """Sent instead of DoneEvent when the turn failed."""

    type: Literal["error"] = "error"
    code: str
    message: str


TurnEvent = TokenEvent | DoneEvent | ErrorEvent
