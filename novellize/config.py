"""
Application configuration using pydantic-settings.

============================================================================
DATA SOURCE ARCHITECTURE
============================================================================
This backend never talks to the document database directly. The novel
catalog is exported by the ingestion job into Redis under ONE well-known
key (novel_cache_key below) and every recommendation request reads that
snapshot. The catalog is eventually stale: it is refreshed only by the
ingestion job and expires after novel_cache_ttl_seconds.

OpenAI is used for two single-turn chat completions per request:
- Preference extraction (strict JSON object output)
- Explanation text (short, friendly prose)
============================================================================
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Novellize API"
    debug: bool = False
    log_level: str = "INFO"

    # CORS - production deployments MUST set CORS_ORIGINS env var explicitly.
    cors_origins: list[str] = [
        "http://localhost:3000",
    ]

    # Redis
    redis_url: str = "redis://localhost:6379"
    novel_cache_key: str = "all_novels_test_v3"
    novel_cache_ttl_seconds: int = 3600
    max_cache_value_chars: int = 1_000_000

    # OpenAI
    openai_api_key: str | None = None
    openai_model: str = "gpt-4"
    openai_temperature: float = 0.7
    explanation_max_tokens: int = 150
    llm_timeout_seconds: float = 8.0

    # Recommendation engine
    recommendation_limit: int = 5
    genre_weight: float = 3.0
    tag_weight: float = 2.0
    status_weight: float = 1.5
    type_weight: float = 1.0
    rating_weight: float = 1.0
    exclusion_penalty: float = 5.0

    # Rate limiting (slowapi syntax)
    rate_limit_enabled: bool = True
    chat_rate_limit: str = "10/minute"

    # Admin authentication - protects cache writes when set
    admin_api_key: str | None = None

    # Public site, used for sitemap URLs
    site_base_url: str = "https://www.novellize.com"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
