"""Model and search provider configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

LLMProviderType = Literal["openrouter", "mock"]
SearchProviderType = Literal["google", "none"]


class LLMProviderConfig(BaseModel):
    """Chat model settings. The API key comes from OPENROUTER_API_KEY."""

    provider: LLMProviderType = Field(default="openrouter", description="Provider type")
    model: str = Field(
        default="anthropic/claude-sonnet-4.5",
        description="Model identifier as understood by the provider",
    )
    base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenAI-compatible API base URL",
    )
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)
    timeout: float = Field(default=90.0, gt=0, description="Request timeout in seconds")
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts to open a completion stream",
    )


class SearchProviderConfig(BaseModel):
    """Web search settings. Credentials come from GOOGLE_API_KEY / GOOGLE_CX."""

    provider: SearchProviderType = Field(default="google")
    endpoint: str = Field(default="https://www.googleapis.com/customsearch/v1")
    max_results: int = Field(default=4, gt=0, le=10)
    timeout: float = Field(default=10.0, gt=0)


class ProvidersConfig(BaseModel):
    """External providers."""

    llm: LLMProviderConfig = Field(default_factory=LLMProviderConfig)
    search: SearchProviderConfig = Field(default_factory=SearchProviderConfig)
