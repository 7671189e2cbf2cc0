"""SearchProvider factory."""

from canvaspartner.config.models.providers import SearchProviderConfig
from canvaspartner.observability.logging import get_logger
from canvaspartner.providers.search.base import DisabledSearchProvider, SearchProvider
from canvaspartner.providers.search.google import GoogleSearchProvider

logger = get_logger(__name__)


def create_search_provider(config: SearchProviderConfig) -> SearchProvider:
    """Create a SearchProvider instance based on configuration.

    Raises:
        ValueError: If provider type is not supported
    """
    logger.info("creating_search_provider", provider=config.provider)

    if config.provider == "none":
        return DisabledSearchProvider()
    if config.provider == "google":
        return GoogleSearchProvider(config)

    raise ValueError(f"Unsupported search provider: {config.provider}")
