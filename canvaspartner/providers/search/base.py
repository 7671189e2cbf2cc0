"""Web search provider interface and result models."""

from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel, Field

SearchStatus = Literal["success", "not_configured", "error"]


class SearchResult(BaseModel):
    """A single web search hit."""

    title: str = Field(default="", description="Page title")
    snippet: str = Field(default="", description="Text excerpt")
    source: str = Field(default="", description="Page URL")


class SearchResponse(BaseModel):
    """Outcome of one search query."""

    status: SearchStatus = Field(..., description="Whether the search ran")
    query: str = Field(..., description="Query as sent")
    results: list[SearchResult] = Field(default_factory=list)
    message: str | None = Field(default=None, description="Failure detail")


class SearchProvider(ABC):
    """Abstract web search backend.

    search() never raises for provider-side failures; they are reported
    through SearchResponse.status so the tool layer can explain them.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""

    @abstractmethod
    async def search(self, query: str) -> SearchResponse:
        """Run a query and return at most the configured number of results."""


class DisabledSearchProvider(SearchProvider):
    """Search backend used when no provider is configured."""

    @property
    def provider_name(self) -> str:
        return "none"

    async def search(self, query: str) -> SearchResponse:
        return SearchResponse(
            status="not_configured",
            query=query,
            message="Web search is not configured",
        )
