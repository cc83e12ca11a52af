"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "postgres"]


class PostgresConfig(BaseModel):
    """PostgreSQL connection pool configuration.

    The DSN itself comes from DEEPCURRENT_DATABASE_URL / DATABASE_URL
    when not set here.
    """

    dsn: str | None = Field(default=None, description="Connection string")
    min_pool_size: int = Field(
        default=5,
        gt=0,
        description="Minimum connections to keep open",
    )
    max_pool_size: int = Field(
        default=20,
        gt=0,
        description="Maximum connections in pool",
    )
    max_inactive_connection_lifetime: float = Field(
        default=300.0,
        gt=0,
        description="Close connections idle longer than this (seconds)",
    )
    command_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Default timeout for queries (seconds)",
    )


class StorageConfig(BaseModel):
    """Store backend selection.

    All stores share one backend; "postgres" falls back to in-memory
    stores when the database is unreachable at startup.
    """

    backend: BackendType = Field(default="inmemory", description="Store backend")
    postgres: PostgresConfig = Field(
        default_factory=PostgresConfig,
        description="PostgreSQL settings",
    )
