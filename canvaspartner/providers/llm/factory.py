"""LLMProvider factory.

The OpenRouter API key is read from OPENROUTER_API_KEY by the provider
itself; everything else comes from the [providers.llm] config section.
"""

from canvaspartner.config.models.providers import LLMProviderConfig
from canvaspartner.observability.logging import get_logger
from canvaspartner.providers.llm.base import LLMProvider
from canvaspartner.providers.llm.mock import MockLLMProvider
from canvaspartner.providers.llm.openrouter import OpenRouterProvider

logger = get_logger(__name__)


def create_llm_provider(config: LLMProviderConfig) -> LLMProvider:
    """Create an LLMProvider instance based on configuration.

    Raises:
        ValueError: If provider type is not supported
    """
    logger.info("creating_llm_provider", provider=config.provider, model=config.model)

    if config.provider == "mock":
        return MockLLMProvider()
    if config.provider == "openrouter":
        return OpenRouterProvider(config)

    raise ValueError(f"Unsupported LLM provider: {config.provider}")
