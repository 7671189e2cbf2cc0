"""Tests for the bounded tool-calling loop."""

import asyncio
import json
from uuid import UUID

import pytest

from canvaspartner.orchestration.models import (
    FinishReason,
    LoopFinished,
    LoopState,
    RoundCompleted,
)
from canvaspartner.orchestration.step_loop import StepLoop
from canvaspartner.providers.llm import MockLLMProvider, MockResponse
from canvaspartner.providers.llm.base import (
    LLMMessage,
    RateLimitError,
    TextDelta,
)
from canvaspartner.tools import ToolContext, ToolRegistry

BLOCKS = {"blocks": [{"tag": "customer_segments", "content": "Students"}]}


def _instructions(active_canvas_id: UUID | None) -> str:
    return f"instructions canvas={active_canvas_id}"


def _loop(provider: MockLLMProvider, registry: ToolRegistry, **kwargs) -> StepLoop:
    return StepLoop(provider, registry, instructions=_instructions, **kwargs)


async def _collect(loop: StepLoop, history=None, context=None, cancel=None) -> list:
    history = history or [LLMMessage(role="user", content="hello")]
    context = context or ToolContext(user_id="u", session_id="s")
    return [event async for event in loop.run(history, context, cancel=cancel)]


class TestStepLoop:
    @pytest.mark.asyncio
    async def test_text_only_response_finishes_in_one_round(self, registry) -> None:
        provider = MockLLMProvider([MockResponse(text="Tell me about your customers.")])
        loop = _loop(provider, registry)

        events = await _collect(loop)

        text = "".join(e.content for e in events if isinstance(e, TextDelta))
        assert text == "Tell me about your customers."
        assert events[-1] == LoopFinished(rounds=1, reason=FinishReason.COMPLETED)
        assert loop.state == LoopState.FINISHED
        assert len(provider.call_history) == 1

    @pytest.mark.asyncio
    async def test_system_message_is_first_and_tools_are_declared(self, registry) -> None:
        provider = MockLLMProvider()
        await _collect(_loop(provider, registry))

        call = provider.call_history[0]
        assert call["messages"][0] == LLMMessage(role="system", content=_instructions(None))
        assert call["messages"][1] == LLMMessage(role="user", content="hello")
        assert {t["function"]["name"] for t in call["tools"]} == set(registry.names)
        assert call["tool_choice"] == "auto"

    @pytest.mark.asyncio
    async def test_tool_round_then_answer(self, registry) -> None:
        provider = MockLLMProvider(
            [
                MockResponse.calling("create_canvas", BLOCKS, call_id="call_1"),
                MockResponse(text="Saved your segments."),
            ]
        )
        loop = _loop(provider, registry)

        events = await _collect(loop)

        rounds = [e for e in events if isinstance(e, RoundCompleted)]
        assert len(rounds) == 1
        completed = rounds[0]
        assert completed.round_number == 1
        assert completed.assistant_message.content is None
        assert [m.tool_call_id for m in completed.tool_messages] == ["call_1"]
        assert completed.active_canvas_id is not None
        assert json.loads(completed.tool_messages[0].content)["canvas_id"] == str(
            completed.active_canvas_id
        )
        assert events[-1] == LoopFinished(rounds=2, reason=FinishReason.COMPLETED)

    @pytest.mark.asyncio
    async def test_next_round_sees_tool_results_and_new_canvas(self, registry) -> None:
        provider = MockLLMProvider(
            [
                MockResponse.calling("create_canvas", BLOCKS, call_id="call_1"),
                MockResponse(text="Done."),
            ]
        )
        loop = _loop(provider, registry)
        events = await _collect(loop)
        canvas_id = next(e for e in events if isinstance(e, RoundCompleted)).active_canvas_id

        second = provider.call_history[1]["messages"]
        assert second[0].content == _instructions(canvas_id)
        assert [m.role for m in second[1:]] == ["user", "assistant", "tool"]
        assert second[3].tool_call_id == "call_1"

    @pytest.mark.asyncio
    async def test_round_limit_drops_final_calls(self, registry) -> None:
        provider = MockLLMProvider(
            [MockResponse.calling("get_user_location") for _ in range(5)]
        )
        loop = _loop(provider, registry, max_rounds=3, forced_finish_message="Let's pause.")

        events = await _collect(loop)

        assert len(provider.call_history) == 3
        assert len([e for e in events if isinstance(e, RoundCompleted)]) == 2
        assert [e.content for e in events if isinstance(e, TextDelta)] == ["Let's pause."]
        assert events[-1] == LoopFinished(rounds=3, reason=FinishReason.ROUND_LIMIT)
        # Every call kept in the loop history has an answer
        answered = {m.tool_call_id for m in loop.messages if m.role == "tool"}
        emitted = {c.id for m in loop.messages if m.tool_calls for c in m.tool_calls}
        assert answered == emitted

    @pytest.mark.asyncio
    async def test_round_limit_with_text_does_not_force_message(self, registry) -> None:
        provider = MockLLMProvider(
            [MockResponse.calling("get_user_location", text="Checking. ")]
        )
        loop = _loop(provider, registry, max_rounds=1, forced_finish_message="Let's pause.")

        events = await _collect(loop)

        assert [e.content for e in events if isinstance(e, TextDelta)] == ["Checking. "]

    @pytest.mark.asyncio
    async def test_cancel_stops_before_next_model_call(self, registry) -> None:
        provider = MockLLMProvider(
            [
                MockResponse.calling("get_user_location"),
                MockResponse(text="never sent"),
            ]
        )
        cancel = asyncio.Event()
        loop = _loop(provider, registry)
        events = []
        async for event in loop.run(
            [LLMMessage(role="user", content="hi")],
            ToolContext(user_id="u", session_id="s"),
            cancel=cancel,
        ):
            events.append(event)
            if isinstance(event, RoundCompleted):
                cancel.set()

        assert len(provider.call_history) == 1
        assert isinstance(events[-2], RoundCompleted)
        assert events[-1] == LoopFinished(rounds=1, reason=FinishReason.CANCELLED)

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, registry) -> None:
        provider = MockLLMProvider([MockResponse(text="Partial", error=RateLimitError("slow down"))])
        loop = _loop(provider, registry)

        with pytest.raises(RateLimitError):
            await _collect(loop)

    def test_max_rounds_must_be_positive(self, registry) -> None:
        with pytest.raises(ValueError):
            _loop(MockLLMProvider(), registry, max_rounds=0)
