"""Mock LLM provider for testing."""

import json
from collections.abc import AsyncIterator
from itertools import count
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from canvaspartner.providers.llm.base import (
    LLMMessage,
    LLMProvider,
    ModelEvent,
    ModelFinish,
    ModelToolCall,
    ProviderError,
    TextDelta,
    ToolChoice,
)

_call_ids = count(1)


class MockResponse(BaseModel):
    """One scripted model response.

    `error` is raised after `text` has been streamed, which mimics a
    provider failing mid-response.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    text: str = ""
    tool_calls: list[ModelToolCall] = Field(default_factory=list)
    error: ProviderError | None = None

    @classmethod
    def calling(
        cls,
        name: str,
        arguments: dict[str, Any] | str | None = None,
        *,
        call_id: str | None = None,
        text: str = "",
    ) -> "MockResponse":
        """Script a response that requests a single tool call."""
        return cls(text=text, tool_calls=[mock_tool_call(name, arguments, call_id=call_id)])


def mock_tool_call(
    name: str,
    arguments: dict[str, Any] | str | None = None,
    *,
    call_id: str | None = None,
) -> ModelToolCall:
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return ModelToolCall(
        id=call_id or f"call_mock_{next(_call_ids)}",
        name=name,
        arguments=arguments,
    )


class MockLLMProvider(LLMProvider):
    """Mock LLM provider for testing.

    Plays back scripted responses in order, then falls back to a plain
    text answer. Useful for unit testing and development.
    """

    def __init__(
        self,
        responses: list[MockResponse] | None = None,
        default_response: str = "Mock response",
        stream_chunk_size: int = 10,
    ):
        """Initialize mock provider.

        Args:
            responses: Scripted responses consumed one per stream() call
            default_response: Text returned once the script is exhausted
            stream_chunk_size: Number of chars per streamed delta
        """
        self._responses = list(responses or [])
        self._default_response = default_response
        self._stream_chunk_size = stream_chunk_size
        self._call_history: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    def clear_history(self) -> None:
        self._call_history.clear()

    def queue(self, *responses: MockResponse) -> None:
        """Append responses to the script."""
        self._responses.extend(responses)

    async def stream(
        self,
        messages: list[LLMMessage],
        *,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: ToolChoice = "auto",
    ) -> AsyncIterator[ModelEvent]:
        self._call_history.append({
            "messages": [message.model_copy(deep=True) for message in messages],
            "tools": tools,
            "tool_choice": tool_choice,
        })

        if self._responses:
            response = self._responses.pop(0)
        else:
            response = MockResponse(text=self._default_response)

        text = response.text
        for i in range(0, len(text), self._stream_chunk_size):
            yield TextDelta(content=text[i:i + self._stream_chunk_size])

        if response.error is not None:
            raise response.error

        yield ModelFinish(
            tool_calls=list(response.tool_calls),
            finish_reason="tool_calls" if response.tool_calls else "stop",
        )
