"""Tests for OpenRouterProvider against a fake OpenAI client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from canvaspartner.config.models.providers import LLMProviderConfig
from canvaspartner.providers.llm.base import (
    AuthenticationError,
    ContentFilterError,
    LLMMessage,
    ModelFinish,
    ModelToolCall,
    ProviderUnavailableError,
    RateLimitError,
    StreamInterruptedError,
    TextDelta,
)
from canvaspartner.providers.llm.openrouter import OpenRouterProvider, map_openai_error

REQUEST = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")


def _chunk(content=None, tool_calls=None, finish_reason=None, usage=None):
    return SimpleNamespace(
        choices=[
            SimpleNamespace(
                delta=SimpleNamespace(content=content, tool_calls=tool_calls),
                finish_reason=finish_reason,
            )
        ],
        usage=usage,
    )


def _call_delta(index, call_id=None, name=None, arguments=None):
    return SimpleNamespace(
        index=index,
        id=call_id,
        function=SimpleNamespace(name=name, arguments=arguments),
    )


class _Stream:
    def __init__(self, chunks, error: Exception | None = None) -> None:
        self._chunks = chunks
        self._error = error

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error


def _provider(create: AsyncMock, **config) -> OpenRouterProvider:
    client = MagicMock()
    client.chat.completions.create = create
    return OpenRouterProvider(LLMProviderConfig(model="test/model", **config), client=client)


async def _collect(provider: OpenRouterProvider, **kwargs) -> list:
    return [e async for e in provider.stream([LLMMessage(role="user", content="hi")], **kwargs)]


class TestStreaming:
    @pytest.mark.asyncio
    async def test_text_deltas_then_finish(self) -> None:
        create = AsyncMock(
            return_value=_Stream(
                [
                    _chunk("Hel"),
                    _chunk("lo"),
                    _chunk(finish_reason="stop"),
                    SimpleNamespace(
                        choices=[],
                        usage=SimpleNamespace(
                            prompt_tokens=5, completion_tokens=2, total_tokens=7
                        ),
                    ),
                ]
            )
        )

        events = await _collect(_provider(create))

        assert events[:2] == [TextDelta(content="Hel"), TextDelta(content="lo")]
        finish = events[-1]
        assert isinstance(finish, ModelFinish)
        assert finish.finish_reason == "stop"
        assert finish.usage.total_tokens == 7

    @pytest.mark.asyncio
    async def test_tool_call_fragments_are_assembled(self) -> None:
        create = AsyncMock(
            return_value=_Stream(
                [
                    _chunk(tool_calls=[_call_delta(0, "call_1", "search_web", '{"que')]),
                    _chunk(tool_calls=[_call_delta(0, arguments='ry": "cafes"}')]),
                    _chunk(tool_calls=[_call_delta(1, "call_2", "get_user_location")]),
                    _chunk(finish_reason="tool_calls"),
                ]
            )
        )

        events = await _collect(_provider(create))

        assert events[-1].tool_calls == [
            ModelToolCall(id="call_1", name="search_web", arguments='{"query": "cafes"}'),
            ModelToolCall(id="call_2", name="get_user_location", arguments="{}"),
        ]

    @pytest.mark.asyncio
    async def test_payload(self) -> None:
        create = AsyncMock(return_value=_Stream([_chunk(finish_reason="stop")]))
        tools = [{"type": "function", "function": {"name": "search_web", "parameters": {}}}]

        await _collect(_provider(create, max_tokens=100), tools=tools, tool_choice="required")

        payload = create.call_args.kwargs
        assert payload["model"] == "test/model"
        assert payload["stream"] is True
        assert payload["messages"] == [{"role": "user", "content": "hi"}]
        assert payload["tools"] == tools
        assert payload["tool_choice"] == "required"
        assert payload["max_tokens"] == 100

    @pytest.mark.asyncio
    async def test_no_tools_omits_tool_choice(self) -> None:
        create = AsyncMock(return_value=_Stream([_chunk(finish_reason="stop")]))
        await _collect(_provider(create))
        assert "tool_choice" not in create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_content_filter(self) -> None:
        create = AsyncMock(return_value=_Stream([_chunk(finish_reason="content_filter")]))
        with pytest.raises(ContentFilterError):
            await _collect(_provider(create))

    @pytest.mark.asyncio
    async def test_mid_stream_failure_is_interrupted(self) -> None:
        create = AsyncMock(
            return_value=_Stream([_chunk("Hi")], error=httpx.ReadError("reset", request=REQUEST))
        )
        received = []
        with pytest.raises(StreamInterruptedError):
            async for event in _provider(create).stream([]):
                received.append(event)
        assert received == [TextDelta(content="Hi")]


class TestOpening:
    @pytest.mark.asyncio
    async def test_connection_errors_are_retried(self) -> None:
        create = AsyncMock(
            side_effect=[
                openai.APIConnectionError(request=REQUEST),
                _Stream([_chunk("ok"), _chunk(finish_reason="stop")]),
            ]
        )

        events = await _collect(_provider(create, max_retries=2))

        assert create.await_count == 2
        assert events[0] == TextDelta(content="ok")

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_unavailable(self) -> None:
        create = AsyncMock(side_effect=openai.APIConnectionError(request=REQUEST))

        with pytest.raises(ProviderUnavailableError):
            await _collect(_provider(create, max_retries=1))

    @pytest.mark.asyncio
    async def test_authentication_error_is_not_retried(self) -> None:
        create = AsyncMock(
            side_effect=openai.AuthenticationError(
                "bad key", response=httpx.Response(401, request=REQUEST), body=None
            )
        )

        with pytest.raises(AuthenticationError):
            await _collect(_provider(create, max_retries=3))
        assert create.await_count == 1


class TestErrorMapping:
    def test_rate_limit(self) -> None:
        error = openai.RateLimitError(
            "slow down", response=httpx.Response(429, request=REQUEST), body=None
        )
        assert isinstance(map_openai_error(error), RateLimitError)

    def test_unknown_errors_become_provider_errors(self) -> None:
        mapped = map_openai_error(ValueError("odd"))
        assert mapped.error_type == "provider_error"
