"""Google Custom Search provider.

Credentials are read from GOOGLE_API_KEY and GOOGLE_CX. Without them the
provider answers every query with a not_configured response.
"""

import os

import httpx

from canvaspartner.config.models.providers import SearchProviderConfig
from canvaspartner.observability.logging import get_logger
from canvaspartner.providers.search.base import (
    SearchProvider,
    SearchResponse,
    SearchResult,
)

logger = get_logger(__name__)


class GoogleSearchProvider(SearchProvider):
    """Searches the web through the Custom Search JSON API."""

    def __init__(
        self,
        config: SearchProviderConfig,
        *,
        api_key: str | None = None,
        cx: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._api_key = api_key if api_key is not None else os.environ.get("GOOGLE_API_KEY")
        self._cx = cx if cx is not None else os.environ.get("GOOGLE_CX")
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._cx)

    async def search(self, query: str) -> SearchResponse:
        if not self.is_configured:
            logger.warning("search_not_configured", provider=self.provider_name)
            return SearchResponse(
                status="not_configured",
                query=query,
                message="Web search is not configured",
            )

        params = {"key": self._api_key, "cx": self._cx, "q": query}
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout, transport=self._transport
            ) as client:
                response = await client.get(self._config.endpoint, params=params)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("search_request_failed", provider=self.provider_name, error=str(e))
            return SearchResponse(status="error", query=query, message=str(e))

        items = (payload.get("items") if isinstance(payload, dict) else None) or []
        results = [
            SearchResult(
                title=item.get("title") or "",
                snippet=item.get("snippet") or "",
                source=item.get("link") or "",
            )
            for item in items[: self._config.max_results]
            if isinstance(item, dict)
        ]
        logger.info("search_completed", provider=self.provider_name, result_count=len(results))
        return SearchResponse(status="success", query=query, results=results)
