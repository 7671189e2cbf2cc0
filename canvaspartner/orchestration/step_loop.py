"""Bounded tool-calling loop for one user turn.

Each round streams one model response. A response without tool calls ends
the turn. A response with tool calls has them executed through the
registry and the results appended to the history before the next round.

The loop never makes more than max_rounds model calls. Tool calls in the
response to the last allowed call are dropped without being executed, so
the conversation never ends on a call nobody answered.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from uuid import UUID

from canvaspartner.observability.logging import get_logger
from canvaspartner.orchestration.models import (
    FinishReason,
    LoopEvent,
    LoopFinished,
    LoopState,
    RoundCompleted,
)
from canvaspartner.providers.llm.base import (
    LLMMessage,
    LLMProvider,
    ModelFinish,
    StreamInterruptedError,
    TextDelta,
    ToolChoice,
)
from canvaspartner.tools.models import ToolContext
from canvaspartner.tools.registry import ToolRegistry

logger = get_logger(__name__)

InstructionBuilder = Callable[[UUID | None], str]


class StepLoop:
    """Runs the model/tool rounds of a single turn.

    One instance per turn; `state`, `rounds` and `messages` describe the
    run after (or while) it executes.
    """

    def __init__(
        self,
        provider: LLMProvider,
        registry: ToolRegistry,
        *,
        instructions: InstructionBuilder,
        max_rounds: int = 10,
        tool_choice: ToolChoice = "auto",
        forced_finish_message: str = "",
    ) -> None:
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        self._provider = provider
        self._registry = registry
        self._instructions = instructions
        self._max_rounds = max_rounds
        self._tool_choice = tool_choice
        self._forced_finish_message = forced_finish_message

        self.state = LoopState.AWAITING_MODEL
        self.rounds = 0
        self.messages: list[LLMMessage] = []

    async def run(
        self,
        history: list[LLMMessage],
        context: ToolContext,
        *,
        cancel: asyncio.Event | None = None,
    ) -> AsyncIterator[LoopEvent]:
        """Drive the loop, yielding text deltas, completed rounds and the finish.

        Raises:
            ProviderError: If the model call fails; the round in flight is lost
        """
        self.messages = list(history)
        declarations = self._registry.declarations()
        text_emitted = False

        while True:
            if self.rounds > 0 and cancel is not None and cancel.is_set():
                logger.info("step_loop_cancelled", rounds=self.rounds)
                self.state = LoopState.FINISHED
                yield LoopFinished(rounds=self.rounds, reason=FinishReason.CANCELLED)
                return

            self.state = LoopState.AWAITING_MODEL
            self.rounds += 1
            system = LLMMessage(
                role="system",
                content=self._instructions(context.active_canvas_id),
            )

            finish: ModelFinish | None = None
            async for event in self._provider.stream(
                [system, *self.messages],
                tools=declarations,
                tool_choice=self._tool_choice,
            ):
                if isinstance(event, TextDelta):
                    if event.content:
                        text_emitted = True
                        yield event
                else:
                    finish = event

            if finish is None:
                raise StreamInterruptedError("Model stream ended without a finish event")

            if not finish.tool_calls:
                self.state = LoopState.FINISHED
                logger.debug("step_loop_completed", rounds=self.rounds)
                yield LoopFinished(rounds=self.rounds, reason=FinishReason.COMPLETED)
                return

            self.state = LoopState.HAS_TOOL_CALLS
            if self.rounds >= self._max_rounds:
                logger.warning(
                    "step_loop_round_limit",
                    rounds=self.rounds,
                    dropped_calls=[call.name for call in finish.tool_calls],
                )
                if not text_emitted and self._forced_finish_message:
                    yield TextDelta(content=self._forced_finish_message)
                self.state = LoopState.FINISHED
                yield LoopFinished(rounds=self.rounds, reason=FinishReason.ROUND_LIMIT)
                return

            self.state = LoopState.EXECUTING_TOOLS
            results = await self._registry.execute_round(finish.tool_calls, context)

            assistant = LLMMessage(role="assistant", content=None, tool_calls=finish.tool_calls)
            tool_messages = [
                LLMMessage(role="tool", content=result.to_content(), tool_call_id=call.id)
                for call, result in zip(finish.tool_calls, results, strict=True)
            ]
            self.messages.extend([assistant, *tool_messages])

            yield RoundCompleted(
                round_number=self.rounds,
                tool_calls=finish.tool_calls,
                results=results,
                assistant_message=assistant,
                tool_messages=tool_messages,
                active_canvas_id=context.active_canvas_id,
            )
