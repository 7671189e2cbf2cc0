"""Turn orchestration: from an inbound message to a persisted answer.

A turn runs in two phases. prepare_turn validates the message and resolves
the session, and may reject the turn; nothing has been streamed at that
point so the caller can still answer with an error status. stream_turn
then replays history, runs the step loop and persists as it goes:

- the user message before the first model call;
- each completed tool round (assistant call message, then one tool message
  per call) as soon as it finishes, followed by the session's active canvas;
- the final assistant message, equal to everything streamed this turn.

A model failure ends the turn with an error event. Text that was already
streamed is still persisted; a round that never completed leaves no trace.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from uuid import UUID

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.config.models.agent import AgentConfig
from canvaspartner.conversation.history import reconstruct_history
from canvaspartner.conversation.models import MessageRole
from canvaspartner.conversation.store import MessageStore, SessionStore
from canvaspartner.observability.logging import (
    bind_turn_context,
    clear_turn_context,
    get_logger,
)
from canvaspartner.observability.metrics import (
    MODEL_ROUNDS,
    PROVIDER_ERRORS,
    TURN_LATENCY,
    TURNS,
)
from canvaspartner.orchestration.errors import InvalidMessageError, SessionAccessError
from canvaspartner.orchestration.models import (
    DoneEvent,
    ErrorEvent,
    FinishReason,
    LoopFinished,
    PreparedTurn,
    RoundCompleted,
    TokenEvent,
    TurnEvent,
)
from canvaspartner.orchestration.prompts import InstructionContext, build_instructions
from canvaspartner.orchestration.step_loop import StepLoop
from canvaspartner.orchestration.streaming import StreamAccumulator
from canvaspartner.providers.llm.base import (
    LLMMessage,
    LLMProvider,
    ProviderError,
    TextDelta,
)
from canvaspartner.tools.models import ToolContext
from canvaspartner.tools.registry import ToolRegistry

logger = get_logger(__name__)


class TurnOrchestrator:
    """Glue between the stores, the step loop and the client stream."""

    def __init__(
        self,
        session_store: SessionStore,
        message_store: MessageStore,
        provider: LLMProvider,
        registry: ToolRegistry,
        config: AgentConfig,
    ) -> None:
        self._sessions = session_store
        self._messages = message_store
        self._provider = provider
        self._registry = registry
        self._config = config

    async def prepare_turn(
        self,
        *,
        user_id: str,
        session_id: str,
        message: str,
        location: GeoPoint | None = None,
    ) -> PreparedTurn:
        """Validate the message and load or create the session.

        Raises:
            InvalidMessageError: If the message is blank or too long
            SessionAccessError: If the session belongs to another user
        """
        if not message or not message.strip():
            raise InvalidMessageError("Message cannot be empty")
        if len(message) > self._config.max_message_length:
            raise InvalidMessageError(
                f"Message exceeds {self._config.max_message_length} characters"
            )

        session = await self._sessions.get(session_id)
        if session is not None:
            if not session.is_owned_by(user_id):
                logger.warning("session_access_denied", session_id=session_id)
                raise SessionAccessError(f"Session {session_id} not found")
            return PreparedTurn(
                session=session,
                user_id=user_id,
                message=message,
                location=location,
            )

        title = message.strip()[: self._config.title_max_length]
        session = await self._sessions.create(session_id, user_id, title)
        logger.info("session_started", session_id=session_id)
        return PreparedTurn(
            session=session,
            is_new_session=True,
            user_id=user_id,
            message=message,
            location=location,
        )

    def _build_loop(self, location: GeoPoint | None) -> StepLoop:
        def instructions(active_canvas_id: UUID | None) -> str:
            return build_instructions(
                InstructionContext(active_canvas_id=active_canvas_id, location=location)
            )

        return StepLoop(
            self._provider,
            self._registry,
            instructions=instructions,
            max_rounds=self._config.max_rounds,
            tool_choice=self._config.tool_choice,
            forced_finish_message=self._config.forced_finish_message,
        )

    async def stream_turn(
        self,
        turn: PreparedTurn,
        cancel: asyncio.Event | None = None,
    ) -> AsyncIterator[TurnEvent]:
        """Run the turn, yielding token events then one done or error event."""
        session = turn.session
        session_id = session.session_id
        bind_turn_context(session_id=session_id, user_id=turn.user_id)
        start = time.perf_counter()
        outcome = "completed"
        buffer = StreamAccumulator()
        loop = self._build_loop(turn.location)

        try:
            rows = await self._messages.list_by_session(session_id)
            history = reconstruct_history(rows)
            active_canvas_id = session.active_canvas_id or history.active_canvas_id

            await self._messages.append(
                session_id,
                MessageRole.USER,
                turn.message,
                location=turn.location,
            )

            context = ToolContext(
                user_id=turn.user_id,
                session_id=session_id,
                location=turn.location,
                active_canvas_id=active_canvas_id,
            )
            replay = [*history.messages, LLMMessage(role="user", content=turn.message)]
            finished: LoopFinished | None = None

            try:
                async for event in loop.run(replay, context, cancel=cancel):
                    if isinstance(event, TextDelta):
                        buffer.append(event.content)
                        yield TokenEvent(content=event.content)
                    elif isinstance(event, RoundCompleted):
                        await self._persist_round(session_id, event)
                        if event.active_canvas_id != active_canvas_id:
                            active_canvas_id = event.active_canvas_id
                            await self._sessions.set_active_canvas(session_id, active_canvas_id)
                    else:
                        finished = event
            except ProviderError as e:
                outcome = "provider_error"
                PROVIDER_ERRORS.labels(error_type=e.error_type).inc()
                logger.error(
                    "turn_provider_error",
                    error_type=e.error_type,
                    error=str(e),
                    rounds=loop.rounds,
                    streamed_chars=len(buffer),
                )
                if buffer:
                    await self._messages.append(session_id, MessageRole.ASSISTANT, buffer.text)
                await self._sessions.touch(session_id)
                yield ErrorEvent(
                    code="LLM_ERROR",
                    message="The assistant is unavailable right now. Please try again.",
                )
                return

            if buffer:
                await self._messages.append(session_id, MessageRole.ASSISTANT, buffer.text)
            await self._sessions.touch(session_id)

            reason = finished.reason if finished else FinishReason.COMPLETED
            if reason != FinishReason.COMPLETED:
                outcome = reason.value
            logger.info(
                "turn_completed",
                rounds=loop.rounds,
                finish_reason=reason.value,
                canvas_id=str(active_canvas_id) if active_canvas_id else None,
            )
            yield DoneEvent(
                session_id=session_id,
                is_new_session=turn.is_new_session,
                title=session.title,
                canvas_id=active_canvas_id,
                rounds=loop.rounds,
                finish_reason=reason,
            )
        except Exception as e:  # noqa: BLE001
            outcome = "internal_error"
            logger.exception("turn_failed", error=str(e))
            yield ErrorEvent(code="INTERNAL_ERROR", message="The turn could not be completed.")
        finally:
            TURNS.labels(outcome=outcome).inc()
            TURN_LATENCY.observe(time.perf_counter() - start)
            MODEL_ROUNDS.observe(loop.rounds)
            clear_turn_context()

    async def _persist_round(self, session_id: str, event: RoundCompleted) -> None:
        await self._messages.append(
            session_id,
            MessageRole.ASSISTANT,
            "",
            tool_calls=[call.to_openai() for call in event.tool_calls],
        )
        for message in event.tool_messages:
            await self._messages.append(
                session_id,
                MessageRole.TOOL,
                message.content or "",
                tool_call_id=message.tool_call_id,
            )
