"""
FastAPI dependency injection module for the Placement Analytics backend.

This module provides reusable FastAPI dependencies for configuration access,
so endpoint handlers never reach for module globals and tests can override
settings through `app.dependency_overrides`.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- SettingsDep: Type alias for injecting Settings into endpoints

Usage Examples:
    @router.post("/analytics/placements")
    async def placement_analytics(
        request: PlacementAnalyticsRequest,
        settings: SettingsDep
    ) -> PlacementAnalytics:
        policy = build_policy(settings, request.dashboard)
        ...
"""

from typing import Annotated

from fastapi import Depends

from backend.core.config import Settings, get_settings


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the application settings for dependency injection.

    Wraps get_settings() so tests can override it with
    `app.dependency_overrides[get_settings_dependency] = lambda: Settings(...)`.

    Returns:
        Settings: The cached application settings instance.
    """
    return get_settings()


# Type alias for injecting settings into endpoint handlers
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
