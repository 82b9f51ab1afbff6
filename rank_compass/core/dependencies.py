"""
FastAPI dependency injection module for the Rank Compass backend.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- SettingsDep: Type alias for injecting Settings into endpoints

Usage Examples:
    @router.post("/analyze")
    async def analyze(body: AnalyzeRequest, settings: SettingsDep):
        ...

In tests, override the dependency or call the endpoint coroutine directly
with a settings object:

    app.dependency_overrides[get_settings_dependency] = lambda: mock_settings
"""

from typing import Annotated

from fastapi import Depends

from rank_compass.core.config import Settings, get_settings


def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    This is a thin wrapper around get_settings() so FastAPI's dependency
    override mechanism can replace it in tests.
    """
    return get_settings()


# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
