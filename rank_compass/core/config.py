"""
Settings and environment management module for the Rank Compass backend.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for development
- Singleton pattern via @lru_cache for efficient access
- Optional language-model credentials (the service starts without them and
  reports a configuration error only when an analysis is requested)

Environment Variables:
- ANTHROPIC_API_KEY: API key for the narrative / rank-schedule analysis
- ANTHROPIC_MODEL: Model identifier sent with every analysis request
- ANTHROPIC_API_URL: Messages endpoint (override for proxies)
- LLM_MAX_TOKENS: Maximum completion tokens per request (default: 4096)
- LLM_TIMEOUT_SECONDS: Optional transport timeout (default: none)
- CORS_ORIGINS: Dashboard origins allowed to call the API
- UPLOAD_MAX_ROWS: Largest spreadsheet accepted by the upload endpoint

Usage:
    from rank_compass.core.config import get_settings

    settings = get_settings()
    model = settings.anthropic_model
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# Value shipped in the example .env; treated the same as a missing key
PLACEHOLDER_API_KEY = 'your_api_key_here'


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        anthropic_api_key: API key for the language-model collaborator. Optional
            at startup; a missing or placeholder key fails the analysis request.
        anthropic_model: Model used for both analysis prompts.
        anthropic_api_url: Messages API endpoint.
        anthropic_version: Value of the ``anthropic-version`` request header.
        llm_max_tokens: Maximum completion tokens per request.
        llm_timeout_seconds: Transport timeout. None means wait for the
            collaborator to answer or fail.
        cors_origins: Origins allowed by the CORS middleware.
        upload_max_rows: Row ceiling for uploaded spreadsheets.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Language Model Collaborator
    # =========================================================================

    anthropic_api_key: Optional[str] = None

    anthropic_model: str = 'claude-opus-4-5-20251101'

    anthropic_api_url: str = 'https://api.anthropic.com/v1/messages'

    anthropic_version: str = '2023-06-01'

    llm_max_tokens: int = 4096

    # No timeout by default: a request is awaited to completion or failure
    llm_timeout_seconds: Optional[float] = None

    # =========================================================================
    # Web Layer
    # =========================================================================

    cors_origins: List[str] = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]

    upload_max_rows: int = 5000

    @property
    def has_usable_api_key(self) -> bool:
        """True when an API key is set and is not the example placeholder."""
        key = (self.anthropic_api_key or '').strip()
        return bool(key) and key != PLACEHOLDER_API_KEY


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The cached settings instance.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
