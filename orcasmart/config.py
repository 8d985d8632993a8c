"""Application configuration using Pydantic Settings.

Reads configuration from environment variables with sensible defaults.
Secrets (database password) should be provided via environment variables.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    environment: Literal["prod", "staging", "dev"] = Field(
        default="dev",
        description="Environment name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # =========================================================================
    # Database
    # =========================================================================
    db_url: str = Field(
        default="",
        description="Explicit SQLAlchemy URL, overrides the db_* fields "
        "(e.g. sqlite+aiosqlite:///./catalog.db)",
    )
    db_user: str = Field(
        default="orcasmart",
        description="Database user",
    )
    db_password: str = Field(
        default="",
        description="Database password",
    )
    db_name: str = Field(
        default="orcasmart",
        description="Database name",
    )
    db_host: str = Field(
        default="localhost",
        description="Database host",
    )
    db_port: int = Field(
        default=5432,
        description="Database port",
    )
    db_pool_size: int = Field(
        default=5,
        description="Database connection pool size",
    )
    db_pool_max_overflow: int = Field(
        default=10,
        description="Max overflow connections beyond pool size",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Build the database URL.

        An explicit db_url wins; otherwise a PostgreSQL (asyncpg) URL is
        assembled from the individual fields.
        """
        if self.db_url:
            return self.db_url
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # =========================================================================
    # Catalog classification
    # =========================================================================
    keyword_table_path: str = Field(
        default="",
        description="Path to a YAML keyword table (empty = bundled table)",
    )
    rule_confidence: float = Field(
        default=0.9,
        ge=0.0,
        le=1.0,
        description="Confidence reported for owner rule matches",
    )
    prefix_confidence: float = Field(
        default=0.95,
        ge=0.0,
        le=1.0,
        description="Confidence reported when an existing SKU prefix is recognised",
    )
    keyword_confidence: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Confidence reported for global keyword matches",
    )
    fallback_category: str = Field(
        default="insumos",
        description="Category slug used by finalize when nothing matches",
    )
    fallback_prefix: str = Field(
        default="INS",
        description="Prefix used by finalize when nothing matches",
    )

    # =========================================================================
    # Learning
    # =========================================================================
    learn_min_term_length: int = Field(
        default=4,
        ge=1,
        description="Minimum token length picked up by the learning heuristic",
    )
    learn_max_terms_per_event: int = Field(
        default=2,
        ge=1,
        description="Maximum terms learned from one accepted classification",
    )
    learn_max_terms_per_category: int = Field(
        default=50,
        ge=1,
        description="Maximum learned terms kept per owner and category",
    )

    # =========================================================================
    # Store retries
    # =========================================================================
    store_retry_attempts: int = Field(
        default=5,
        ge=1,
        description="Attempts for atomic store operations before giving up",
    )
    store_retry_backoff_seconds: float = Field(
        default=0.05,
        ge=0.0,
        description="Base backoff between retries (doubled per attempt)",
    )

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=True,
        description="Output logs as JSON",
    )
    log_service_name: str = Field(
        default="orcasmart-catalog",
        description="Service name stamped on every log event",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for convenience
settings = get_settings()
