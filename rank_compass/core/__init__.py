"""
Core infrastructure package for the Rank Compass backend.

Provides:
- Configuration management via pydantic-settings
- Domain exceptions mapped to ``{"error": ...}`` responses
- FastAPI dependency injection utilities

    from rank_compass.core import get_settings, SettingsDep
"""

from rank_compass.core.config import Settings, get_settings
from rank_compass.core.dependencies import get_settings_dependency, SettingsDep
from rank_compass.core.exceptions import (
    RankCompassError,
    SpreadsheetDecodeError,
    EmptyDatasetError,
    LLMConfigurationError,
    LLMTransportError,
    LLMResponseError,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'SettingsDep',
    # Exceptions (from exceptions.py)
    'RankCompassError',
    'SpreadsheetDecodeError',
    'EmptyDatasetError',
    'LLMConfigurationError',
    'LLMTransportError',
    'LLMResponseError',
]
