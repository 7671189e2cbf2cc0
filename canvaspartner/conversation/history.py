"""Rebuild a model-valid conversation from the persisted message log.

The log is written by several code paths over the lifetime of a session
and may contain rows the chat-completions protocol rejects: assistant
messages with nothing in them, tool results whose call was never
recorded, call descriptors missing their id. Replaying such rows makes the
provider fail the whole request, so they are dropped here one by one.

Rules, per row in creation order:
- user: replayed verbatim, a missing content becomes "".
- assistant: content kept only if it has non-whitespace text; tool calls
  kept only if well formed; a row left with neither is dropped.
- tool: replayed only if its tool_call_id answers a call emitted by an
  earlier replayed assistant row that has not been answered yet.
- system and anything else: excluded.
Calls that no tool row ever answered are stripped afterwards.
"""

import json
from collections.abc import Iterable, Mapping
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from canvaspartner.conversation.continuity import ContinuityTracker
from canvaspartner.conversation.models import Message, MessageRole
from canvaspartner.observability.logging import get_logger
from canvaspartner.observability.metrics import HISTORY_ROWS_SKIPPED
from canvaspartner.providers.llm.base import LLMMessage, ModelToolCall

logger = get_logger(__name__)


class ReconstructedHistory(BaseModel):
    """Replayable messages plus what was learned while building them."""

    model_config = ConfigDict(frozen=True)

    messages: list[LLMMessage] = Field(default_factory=list)
    active_canvas_id: UUID | None = Field(
        default=None, description="Canvas id found in tool results"
    )
    skipped: int = Field(default=0, description="Rows excluded as malformed")


def coerce_arguments(arguments: Any) -> str:
    """Render a persisted argument payload as JSON text."""
    if arguments is None:
        return "{}"
    if isinstance(arguments, str):
        return arguments if arguments.strip() else "{}"
    return json.dumps(arguments, ensure_ascii=False, default=str)


def parse_tool_call(raw: Any) -> ModelToolCall | None:
    """Read one persisted call descriptor, None when it is malformed.

    Accepts the chat-completions shape ({"id", "function": {"name",
    "arguments"}}) as well as a flat {"id", "name", "arguments"} shape.
    """
    if isinstance(raw, ModelToolCall):
        return raw
    if not isinstance(raw, Mapping):
        return None

    function = raw.get("function")
    if isinstance(function, Mapping):
        name = function.get("name")
        arguments = function.get("arguments")
    else:
        name = raw.get("name")
        arguments = raw.get("arguments")

    call_id = raw.get("id")
    if not isinstance(call_id, str) or not call_id:
        return None
    if not isinstance(name, str) or not name:
        return None
    return ModelToolCall(id=call_id, name=name, arguments=coerce_arguments(arguments))


def _skip(message: Message, reason: str) -> None:
    logger.warning(
        "history_row_skipped",
        message_id=str(message.message_id),
        role=message.role.value,
        reason=reason,
    )
    HISTORY_ROWS_SKIPPED.labels(reason=reason).inc()


def reconstruct_history(messages: Iterable[Message]) -> ReconstructedHistory:
    """Build the replayable history of one session."""
    replay: list[LLMMessage] = []
    tracker = ContinuityTracker()
    pending_calls: set[str] = set()
    skipped = 0

    for message in messages:
        role = message.role

        if role == MessageRole.USER:
            replay.append(LLMMessage(role="user", content=message.content or ""))

        elif role == MessageRole.ASSISTANT:
            calls: list[ModelToolCall] = []
            seen: set[str] = set()
            for raw in message.tool_calls or []:
                call = parse_tool_call(raw)
                if call is None or call.id in seen:
                    _skip(message, "malformed_tool_call")
                    continue
                seen.add(call.id)
                calls.append(call)

            content = message.content if message.content and message.content.strip() else None
            if content is None and not calls:
                _skip(message, "empty_assistant")
                skipped += 1
                continue

            replay.append(
                LLMMessage(role="assistant", content=content, tool_calls=calls or None)
            )
            pending_calls.update(seen)

        elif role == MessageRole.TOOL:
            tracker.observe(message)
            call_id = message.tool_call_id
            if not call_id:
                _skip(message, "tool_without_call_id")
                skipped += 1
                continue
            if call_id not in pending_calls:
                _skip(message, "orphan_tool_result")
                skipped += 1
                continue
            pending_calls.discard(call_id)
            replay.append(
                LLMMessage(role="tool", content=message.content or "", tool_call_id=call_id)
            )

        # system rows carry no conversational content worth replaying

    if pending_calls:
        replay, dropped = _drop_unanswered(replay, pending_calls)
        skipped += dropped

    return ReconstructedHistory(
        messages=replay,
        active_canvas_id=tracker.active_canvas_id,
        skipped=skipped,
    )


def _drop_unanswered(
    replay: list[LLMMessage], unanswered: set[str]
) -> tuple[list[LLMMessage], int]:
    """Strip calls no tool row ever answered; the protocol rejects them."""
    logger.warning("history_unanswered_tool_calls", count=len(unanswered))
    HISTORY_ROWS_SKIPPED.labels(reason="unanswered_tool_call").inc(len(unanswered))

    result: list[LLMMessage] = []
    dropped = 0
    for message in replay:
        if message.role != "assistant" or not message.tool_calls:
            result.append(message)
            continue
        calls = [call for call in message.tool_calls if call.id not in unanswered]
        if not calls and message.content is None:
            dropped += 1
            continue
        result.append(message.model_copy(update={"tool_calls": calls or None}))
    return result, dropped
