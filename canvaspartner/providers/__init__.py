"""External services: the chat model and web search.

Abstract interfaces with an OpenRouter model provider, a Google search
provider, and mocks for tests and local development.
"""

from canvaspartner.providers.llm import LLMProvider, MockLLMProvider
from canvaspartner.providers.search import SearchProvider

__all__ = [
    "LLMProvider",
    "MockLLMProvider",
    "SearchProvider",
]
