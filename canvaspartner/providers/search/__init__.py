"""Web search providers used by the search_web tool."""

from canvaspartner.providers.search.base import (
    DisabledSearchProvider,
    SearchProvider,
    SearchResponse,
    SearchResult,
)
from canvaspartner.providers.search.factory import create_search_provider
from canvaspartner.providers.search.google import GoogleSearchProvider

__all__ = [
    "DisabledSearchProvider",
    "GoogleSearchProvider",
    "SearchProvider",
    "SearchResponse",
    "SearchResult",
    "create_search_provider",
]
