"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # NCBI identification
    ncbi_api_key: str = ""
    contact_email: str = ""
    tool_name: str = "literature-scout"

    # Rate limiting (NCBI allows 3 req/s anonymously, 10 req/s with a key)
    requests_per_second_without_key: int = 3
    requests_per_second_with_key: int = 10
    rate_limit_interval_seconds: float = 1.0
    rate_limit_max_wait_seconds: float | None = 60.0

    # Transport
    request_timeout_seconds: float = 30.0
    max_retries: int = 3
    retry_base_delay: float = 2.0
    retry_max_delay: float = 30.0

    # Query construction
    default_page_size: int = 10
    default_year_range: int = 2
    max_query_length: int = 800
    max_search_terms: int = 2
    category_scope: Literal["narrow", "broad"] = "narrow"
    strict_field_tags: bool = True

    # App Settings
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        frozen = True

    @property
    def has_api_key(self) -> bool:
        return bool(self.ncbi_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
