"""Chat model providers.

Every provider streams one response at a time as TextDelta events
followed by a single ModelFinish carrying any requested tool calls.
"""

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
)
from canvaspartner.providers.llm.factory import create_llm_provider
from canvaspartner.providers.llm.mock import MockLLMProvider, MockResponse, mock_tool_call
from canvaspartner.providers.llm.openrouter import OpenRouterProvider

__all__ = [
    # Data models
    "LLMMessage",
    "ModelToolCall",
    "ModelEvent",
    "ModelFinish",
    "TextDelta",
    "TokenUsage",
    # Errors
    "ProviderError",
    "AuthenticationError",
    "RateLimitError",
    "ModelError",
    "ContentFilterError",
    "ProviderUnavailableError",
    "StreamInterruptedError",
    # Providers
    "LLMProvider",
    "OpenRouterProvider",
    "create_llm_provider",
    # Testing
    "MockLLMProvider",
    "MockResponse",
    "mock_tool_call",
]
