"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "postgres"]


class PostgresConfig(BaseModel):
    """PostgreSQL pool settings. The DSN itself comes from the environment."""

    min_pool_size: int = Field(default=2, gt=0, description="Minimum connections to keep open")
    max_pool_size: int = Field(default=10, gt=0, description="Maximum connections in pool")
    max_inactive_connection_lifetime: float = Field(
        default=300.0,
        gt=0,
        description="Close connections idle longer than this (seconds)",
    )
    command_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Default timeout for queries (seconds)",
    )


class StorageConfig(BaseModel):
    """Where sessions, messages and canvases live."""

    backend: BackendType = Field(default="inmemory", description="Store backend")
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
