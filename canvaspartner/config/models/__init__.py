"""Configuration model exports.

    from canvaspartner.config.models import AgentConfig, StorageConfig
"""

from canvaspartner.config.models.agent import AgentConfig, DefaultLocationConfig
from canvaspartner.config.models.api import APIConfig
from canvaspartner.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)
from canvaspartner.config.models.providers import (
    LLMProviderConfig,
    ProvidersConfig,
    SearchProviderConfig,
)
from canvaspartner.config.models.storage import PostgresConfig, StorageConfig

__all__ = [
    "AgentConfig",
    "DefaultLocationConfig",
    "APIConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "TracingConfig",
    "LLMProviderConfig",
    "ProvidersConfig",
    "SearchProviderConfig",
    "PostgresConfig",
    "StorageConfig",
]
