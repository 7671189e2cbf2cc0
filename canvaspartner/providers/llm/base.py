"""LLM data models, stream events and error types.

This module provides the core types shared by chat model providers:
- LLMMessage / ModelToolCall: conversation messages in the chat-completions shape
- TextDelta / ModelFinish: events yielded while a completion streams
- LLMProvider: the streaming interface every provider implements
- Error types for different failure modes
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any, Literal

from pydantic import BaseModel, Field

ToolChoice = Literal["auto", "required", "none"]


class ModelToolCall(BaseModel):
    """A function call requested by the model."""

    id: str = Field(..., min_length=1, description="Call identifier")
    name: str = Field(..., min_length=1, description="Tool name")
    arguments: str = Field(default="{}", description="Arguments as JSON text")

    def to_openai(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


class LLMMessage(BaseModel):
    """A message in a conversation."""

    role: Literal["system", "user", "assistant", "tool"] = Field(
        ..., description="Message author"
    )
    content: str | None = Field(default="", description="Message content")
    tool_calls: list[ModelToolCall] | None = Field(
        default=None, description="Calls requested by an assistant message"
    )
    tool_call_id: str | None = Field(
        default=None, description="Call answered by a tool message"
    )

    def to_openai(self) -> dict[str, Any]:
        """Render as a chat-completions message dict."""
        data: dict[str, Any] = {"role": self.role}
        if self.content is not None:
            data["content"] = self.content
        if self.tool_calls:
            data["tool_calls"] = [call.to_openai() for call in self.tool_calls]
        if self.tool_call_id is not None:
            data["tool_call_id"] = self.tool_call_id
        return data


class TokenUsage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int = Field(default=0, description="Tokens in prompt")
    completion_tokens: int = Field(default=0, description="Tokens in completion")
    total_tokens: int = Field(default=0, description="Total tokens used")


class TextDelta(BaseModel):
    """A fragment of assistant text."""

    type: Literal["text_delta"] = "text_delta"
    content: str


class ModelFinish(BaseModel):
    """Terminal event of one model response."""

    type: Literal["finish"] = "finish"
    tool_calls: list[ModelToolCall] = Field(default_factory=list)
    finish_reason: str | None = Field(default=None, description="Why generation stopped")
    usage: TokenUsage | None = None


ModelEvent = TextDelta | ModelFinish


class LLMProvider(ABC):
    """Streaming chat model.

    stream() yields zero or more TextDelta events followed by exactly one
    ModelFinish. Failures raise ProviderError subclasses.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""

    @abstractmethod
    def stream(
        self,
        messages: list[LLMMessage],
        *,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: ToolChoice = "auto",
    ) -> AsyncIterator[ModelEvent]:
        """Stream one model response."""


# ============================================================================
# Error Types
# ============================================================================


class ProviderError(Exception):
    """Base exception for LLM provider errors."""

    error_type = "provider_error"


class AuthenticationError(ProviderError):
    """Invalid or missing API key."""

    error_type = "authentication"


class RateLimitError(ProviderError):
    """Rate limit exceeded."""

    error_type = "rate_limit"


class ModelError(ProviderError):
    """Model not found or unavailable."""

    error_type = "model"


class ContentFilterError(ProviderError):
    """Content blocked by safety filter."""

    error_type = "content_filter"


class ProviderUnavailableError(ProviderError):
    """Provider could not be reached."""

    error_type = "unavailable"


class StreamInterruptedError(ProviderError):
    """The response stream broke after it started."""

    error_type = "stream_interrupted"
