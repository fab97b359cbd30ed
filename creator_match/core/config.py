"""
Settings and environment management for the matching engine.

Configuration is centralized in a pydantic-settings class that loads values
from environment variables and an optional .env file.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for development (the service starts without any env vars)
- Singleton access via @lru_cache

Environment Variables:
- OPENAI_API_KEY: Reasoning-service credential. Without it every reasoning
  call fails with an authentication error and matching runs on fallback scores.
- OPENAI_MODEL: Chat model used for both operations (default: gpt-4o)
- CATALOG_DATA_PATH: JSON snapshot of creators/products/sales to serve
- LOG_LEVEL: Root log level (default: INFO)

Engine Defaults:
- cache_ttl_seconds: 300 (five-minute result cache)
- retry_max_attempts: 3 (one call plus two retries)
- retry_base_delay_seconds: 1.0, doubling per attempt
- min_sales_for_analysis: 5
- min_sales_for_creator_matching: 3

Usage:
    from creator_match.core.config import get_settings

    settings = get_settings()
    model = settings.openai_model
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        openai_api_key: API key for the reasoning service. Optional.
        openai_model: Chat completion model name.
        openai_timeout_seconds: Per-request timeout enforced by the HTTP client.
        insight_temperature: Sampling temperature for creator analysis.
        insight_max_tokens: Output token budget for creator analysis.
        match_temperature: Sampling temperature for matching.
        match_max_tokens: Output token budget for matching.
        cache_ttl_seconds: Lifetime of a cached reasoning result.
        retry_max_attempts: Total attempts per reasoning call, including the first.
        retry_base_delay_seconds: Backoff delay before the first retry.
        retry_backoff_multiplier: Growth factor applied to each later delay.
        min_sales_for_analysis: Sale records required for analysis and
            single-creator matching.
        min_sales_for_creator_matching: Sale records a creator needs to be
            considered when matching creators to a product.
        min_match_score: Score floor the model is told to apply.
        default_match_limit: Matches returned when the caller gives no limit.
        max_match_limit: Upper bound accepted for a match limit.
        catalog_data_path: Optional JSON file loaded into the catalog store.
        log_level: Root logger level name.
        cors_origins: Origins allowed by the CORS middleware.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Reasoning Service
    # =========================================================================

    openai_api_key: Optional[str] = None
    openai_model: str = 'gpt-4o'
    openai_timeout_seconds: float = 30.0

    insight_temperature: float = 0.3
    insight_max_tokens: int = 2000
    match_temperature: float = 0.2
    match_max_tokens: int = 3000

    # =========================================================================
    # Result Cache
    # =========================================================================

    cache_ttl_seconds: float = 300.0

    # =========================================================================
    # Retry Policy
    # =========================================================================

    # Delays: 1s before attempt 2, 2s before attempt 3
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 1.0
    retry_backoff_multiplier: float = 2.0

    # =========================================================================
    # Data Thresholds
    # =========================================================================

    min_sales_for_analysis: int = 5
    min_sales_for_creator_matching: int = 3
    min_match_score: int = 70
    default_match_limit: int = 10
    max_match_limit: int = 50

    # =========================================================================
    # Service
    # =========================================================================

    catalog_data_path: Optional[str] = None
    log_level: str = 'INFO'
    cors_origins: List[str] = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Environment variables are read once per process. To refresh settings in
    tests, clear the cache:

        >>> get_settings.cache_clear()

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
