"""Application settings and configuration.

This module defines all configuration options for the Castcle feed service.
Settings are loaded from environment variables with sensible defaults.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Castcle Feed", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./castcle.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis configuration for cross-process feed locks
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")

    # Feed tuning
    feed_follow_max: int = Field(default=100, alias="FEED_FOLLOW_MAX")
    feed_follow_ratio: float = Field(default=0.5, alias="FEED_FOLLOW_RATIO")
    feed_decay_days: float = Field(default=7.0, alias="FEED_DECAY_DAYS")
    feed_duplicate_max: int = Field(default=3, alias="FEED_DUPLICATE_MAX")
    feed_generation_seconds: int = Field(default=900, alias="FEED_GENERATION_SECONDS")
    feed_lock_backend: str = Field(default="memory", alias="FEED_LOCK_BACKEND")
    feed_lock_timeout_seconds: float = Field(default=10.0, alias="FEED_LOCK_TIMEOUT_SECONDS")
    feed_default_country: str = Field(default="en", alias="FEED_DEFAULT_COUNTRY")

    # Personalization (content scoring) service
    personalization_enabled: bool = Field(default=False, alias="PERSONALIZATION_ENABLED")
    personalization_base_url: str | None = Field(default=None, alias="PERSONALIZATION_BASE_URL")
    personalization_timeout_seconds: float = Field(
        default=5.0,
        alias="PERSONALIZATION_TIMEOUT_SECONDS",
    )
    personalization_api_key: str | None = Field(default=None, alias="PERSONALIZATION_API_KEY")

    # Media URL signing
    media_signing_secret: str = Field(default="change-me", alias="MEDIA_SIGNING_SECRET")
    media_url_ttl_seconds: int = Field(default=3600, alias="MEDIA_URL_TTL_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


@dataclass(frozen=True)
class FeedConfig:
    """Immutable tuning parameters for feed assembly."""

    follow_feed_max: int = 100
    follow_feed_ratio: float = 0.5
    decay_days: float = 7.0
    duplicate_max: int = 3
    generation_seconds: int = 900
    default_country: str = "en"


def load_feed_config(source: Settings | None = None) -> FeedConfig:
    """Build the feed configuration object from settings."""
    source = source or settings
    return FeedConfig(
        follow_feed_max=source.feed_follow_max,
        follow_feed_ratio=source.feed_follow_ratio,
        decay_days=source.feed_decay_days,
        duplicate_max=source.feed_duplicate_max,
        generation_seconds=max(1, source.feed_generation_seconds),
        default_country=source.feed_default_country.lower(),
    )


settings = Settings()
