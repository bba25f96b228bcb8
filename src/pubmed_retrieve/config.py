"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings

from pubmed_retrieve.constants import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_RECORD_ID_FIELD,
    DEFAULT_TIMEOUT,
    PUBMED_FETCH_URL,
    PUBMED_SEARCH_URL,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Endpoints
    pubmed_search_url: str = PUBMED_SEARCH_URL
    pubmed_fetch_url: str = PUBMED_FETCH_URL

    # Request Settings
    pubmed_max_results: int = DEFAULT_MAX_RESULTS
    request_timeout_seconds: float = DEFAULT_TIMEOUT

    # Output Settings
    record_id_field: str = DEFAULT_RECORD_ID_FIELD

    # App Settings
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        frozen = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
