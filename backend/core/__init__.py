"""
Core infrastructure package for the FastAPI backend.

Provides:
- Configuration management via pydantic-settings
- Conversion of settings into the analytics policy record
- FastAPI dependency injection utilities

This module re-exports key components from submodules for convenient importing:

    from backend.core import get_settings, build_policy, SettingsDep

Components Re-exported:
    Settings: Pydantic settings class with all configuration parameters
    get_settings: Function returning the cached Settings singleton
    build_policy: Function building an AnalyticsPolicy for a dashboard variant
    get_settings_dependency: FastAPI dependency returning Settings
    SettingsDep: Type alias for Settings dependency injection
"""

# =============================================================================
# Re-exports from backend.core.config
# =============================================================================
from backend.core.config import Settings, get_settings, build_policy

# =============================================================================
# Re-exports from backend.core.dependencies
# =============================================================================
from backend.core.dependencies import get_settings_dependency, SettingsDep

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    'build_policy',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'SettingsDep',
]
