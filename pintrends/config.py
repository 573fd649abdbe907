"""
Configuration management for the Pin Trends service.
Supports Gemini (primary) and OpenRouter (secondary) enrichment providers
and Google Trends as the measured signal source.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Enrichment providers
    # Provider priority: Gemini → OpenRouter
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.0-flash", alias="GEMINI_MODEL")

    openrouter_api_key: str = Field(default="", alias="OPENROUTER_API_KEY")
    openrouter_model: str = Field(default="google/gemini-2.0-flash-001", alias="OPENROUTER_MODEL")

    # ── Trend resolution ──
    # Cached trend records younger than this are served without provider calls
    trend_cache_ttl_seconds: int = Field(default=600, alias="TREND_CACHE_TTL_SECONDS")
    # Upper bound on any single external call (signal fetch, LLM call)
    provider_timeout_seconds: float = Field(default=10.0, alias="PROVIDER_TIMEOUT_SECONDS")
    # Coalesce concurrent resolutions of the same keyword into one
    single_flight: bool = Field(default=True, alias="SINGLE_FLIGHT")

    # ── Google Trends signal ──
    trends_hl: str = Field(default="en-US", alias="TRENDS_HL")
    trends_tz: int = Field(default=0, alias="TRENDS_TZ")
    trends_geo: str = Field(default="", alias="TRENDS_GEO")
    trends_lookback_days: int = Field(default=7, alias="TRENDS_LOOKBACK_DAYS")

    # ── Provider circuit breaker ──
    provider_health_path: str = Field(default="./data/provider_health.json", alias="PROVIDER_HEALTH_PATH")
    provider_error_base_seconds: float = Field(default=30.0, alias="PROVIDER_ERROR_BASE_SECONDS")
    provider_ratelimit_base_seconds: float = Field(default=15.0, alias="PROVIDER_RATELIMIT_BASE_SECONDS")
    provider_max_backoff_seconds: float = Field(default=120.0, alias="PROVIDER_MAX_BACKOFF_SECONDS")
    provider_broken_threshold: int = Field(default=8, alias="PROVIDER_BROKEN_THRESHOLD")

    # Database
    database_url: str = Field(default="sqlite:///./pintrends.db", alias="DATABASE_URL")
    seed_trends: bool = Field(default=True, alias="SEED_TRENDS")

    # Empty = dev mode, admin routes are open
    api_key: str = Field(default="", alias="API_KEY")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True

    def get_llm_config(self) -> dict:
        """Get the primary enrichment provider configuration.

        Priority: Gemini → OpenRouter
        """
        if self.gemini_api_key:
            return {
                "provider": "gemini",
                "api_key": self.gemini_api_key,
                "model": self.gemini_model,
            }
        return {
            "provider": "openrouter",
            "api_key": self.openrouter_api_key,
            "model": self.openrouter_model,
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
