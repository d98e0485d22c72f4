"""Configuration for docshelf, loaded from environment variables.

Every option can be overridden with a ``DOCSHELF_`` prefixed environment
variable or a ``.env`` file, e.g. ``DOCSHELF_STRUCTURE_CACHE_TTL=60``.
"""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Application settings."""

    # Upstream content API
    content_api_url: str = Field(
        default="http://localhost:3000/api", description="Base URL of the content API"
    )
    request_timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")
    max_retries: int = Field(default=3, ge=1, description="Attempts per upstream request")
    retry_delay: float = Field(default=1.0, ge=0, description="Base backoff delay in seconds")

    # Caches (TTLs in seconds)
    structure_cache_ttl: float = 300.0
    document_cache_ttl: float = 300.0
    related_cache_ttl: float = 300.0
    structure_cache_size: int = 50
    document_cache_size: int = 50
    related_cache_size: int = 100

    # Search
    search_max_results: int = Field(default=20, ge=1)
    search_debounce_ms: int = Field(default=300, ge=0, description="Applied by the UI, not the core")
    max_recent_searches: int = Field(default=10, ge=0)
    preview_length: int = Field(default=200, ge=1)
    highlight_tag: str = "mark"

    # Related documents
    related_limit: int = Field(default=5, ge=1)

    # Search index scheduling
    index_enabled: bool = True
    index_on_startup: bool = True
    index_initial_delay: float = Field(default=5.0, ge=0)
    index_interval: float = Field(default=3600.0, gt=0)
    index_concurrency: int = Field(default=8, ge=1)

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    cors_allowed_origins: str = "*"

    model_config = SettingsConfigDict(
        env_prefix="DOCSHELF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator(
        "structure_cache_ttl",
        "document_cache_ttl",
        "related_cache_ttl",
        "structure_cache_size",
        "document_cache_size",
        "related_cache_size",
    )
    @classmethod
    def must_be_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("cache sizes and TTLs must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS origins as a list (comma separated in the environment)."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


def configure_logging(level: str | None = None) -> None:
    """Set up root logging once at process startup."""
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)


settings = Settings()
