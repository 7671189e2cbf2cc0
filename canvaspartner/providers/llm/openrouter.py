"""OpenRouter chat model provider.

OpenRouter speaks the OpenAI chat-completions protocol, so the official
async SDK is pointed at its base URL. Opening the stream is retried with
exponential backoff; once chunks start flowing a failure is final, since
text already relayed to the user cannot be taken back.
"""

import os
from collections.abc import AsyncIterator
from typing import Any

import httpx
import openai
from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from canvaspartner.config.models.providers import LLMProviderConfig
from canvaspartner.observability.logging import get_logger
from canvaspartner.providers.llm.base import (
    AuthenticationError,
    ContentFilterError,
    LLMMessage,
    LLMProvider,
    ModelError,
    ModelEvent,
    ModelFinish,
    ModelToolCall,
    ProviderError,
    ProviderUnavailableError,
    RateLimitError,
    StreamInterruptedError,
    TextDelta,
    TokenUsage,
    ToolChoice,
)

logger = get_logger(__name__)

API_KEY_ENV = "OPENROUTER_API_KEY"

_RETRYABLE = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
    httpx.TimeoutException,
)


def map_openai_error(error: Exception) -> ProviderError:
    """Translate an SDK exception into the provider error hierarchy."""
    if isinstance(error, ProviderError):
        return error
    if isinstance(error, openai.AuthenticationError | openai.PermissionDeniedError):
        return AuthenticationError(str(error))
    if isinstance(error, openai.RateLimitError):
        return RateLimitError(str(error))
    if isinstance(error, openai.NotFoundError):
        return ModelError(str(error))
    if isinstance(error, openai.APIConnectionError | httpx.TimeoutException):
        return ProviderUnavailableError(str(error))
    return ProviderError(str(error))


class _ToolCallBuffer:
    """Accumulates streamed tool-call fragments keyed by their index."""

    def __init__(self) -> None:
        self._calls: dict[int, dict[str, str]] = {}

    def add(self, delta: Any) -> None:
        index = getattr(delta, "index", None) or 0
        entry = self._calls.setdefault(index, {"id": "", "name": "", "arguments": ""})
        if getattr(delta, "id", None):
            entry["id"] = delta.id
        function = getattr(delta, "function", None)
        if function is not None:
            if getattr(function, "name", None):
                entry["name"] += function.name
            if getattr(function, "arguments", None):
                entry["arguments"] += function.arguments

    def build(self) -> list[ModelToolCall]:
        calls: list[ModelToolCall] = []
        for index in sorted(self._calls):
            entry = self._calls[index]
            if not entry["id"] or not entry["name"]:
                logger.warning("incomplete_tool_call_dropped", index=index)
                continue
            calls.append(
                ModelToolCall(
                    id=entry["id"],
                    name=entry["name"],
                    arguments=entry["arguments"] or "{}",
                )
            )
        return calls


class OpenRouterProvider(LLMProvider):
    """Streams chat completions from OpenRouter."""

    def __init__(
        self,
        config: LLMProviderConfig,
        *,
        api_key: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._config = config
        if client is None:
            api_key = api_key or os.environ.get(API_KEY_ENV, "")
            if not api_key:
                logger.warning("openrouter_api_key_missing", env=API_KEY_ENV)
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=config.base_url,
                timeout=config.timeout,
                max_retries=0,
            )
        self._client = client

    @property
    def provider_name(self) -> str:
        return "openrouter"

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(self._config.max_retries),
            wait=wait_exponential(multiplier=0.5, max=6.0),
            retry=retry_if_exception_type(_RETRYABLE),
        )

    def _build_payload(
        self,
        messages: list[LLMMessage],
        tools: list[dict[str, Any]] | None,
        tool_choice: ToolChoice,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": [message.to_openai() for message in messages],
            "temperature": self._config.temperature,
            "stream": True,
            "stream_options": {"include_usage": True},
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = tool_choice
        if self._config.max_tokens is not None:
            payload["max_tokens"] = self._config.max_tokens
        return payload

    async def _open_stream(self, payload: dict[str, Any]) -> Any:
        try:
            async for attempt in self._retrying():
                with attempt:
                    return await self._client.chat.completions.create(**payload)
        except Exception as e:
            error = map_openai_error(e)
            logger.warning(
                "openrouter_stream_open_failed",
                model=self._config.model,
                error_type=error.error_type,
                error=str(e),
            )
            raise error from e
        raise ProviderUnavailableError("Completion stream could not be opened")

    async def stream(
        self,
        messages: list[LLMMessage],
        *,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: ToolChoice = "auto",
    ) -> AsyncIterator[ModelEvent]:
        payload = self._build_payload(messages, tools, tool_choice)
        logger.debug(
            "openrouter_stream_started",
            model=self._config.model,
            message_count=len(messages),
            tool_count=len(tools or []),
        )
        response = await self._open_stream(payload)

        tool_calls = _ToolCallBuffer()
        finish_reason: str | None = None
        usage: TokenUsage | None = None

        try:
            async for chunk in response:
                if getattr(chunk, "usage", None):
                    usage = TokenUsage(
                        prompt_tokens=chunk.usage.prompt_tokens or 0,
                        completion_tokens=chunk.usage.completion_tokens or 0,
                        total_tokens=chunk.usage.total_tokens or 0,
                    )
                for choice in chunk.choices or []:
                    delta = choice.delta
                    if delta is not None:
                        if delta.content:
                            yield TextDelta(content=delta.content)
                        for call_delta in delta.tool_calls or []:
                            tool_calls.add(call_delta)
                    if choice.finish_reason:
                        finish_reason = choice.finish_reason
        except (openai.APIError, httpx.HTTPError) as e:
            logger.warning("openrouter_stream_interrupted", error=str(e))
            raise StreamInterruptedError(str(e)) from e

        if finish_reason == "content_filter":
            raise ContentFilterError("Response blocked by the provider's content filter")

        yield ModelFinish(
            tool_calls=tool_calls.build(),
            finish_reason=finish_reason,
            usage=usage,
        )
