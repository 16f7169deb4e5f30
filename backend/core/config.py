"""
Settings and environment management module for the Placement Analytics backend.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults matching both reporting dashboards
- Singleton pattern via @lru_cache for efficient access
- Conversion into the AnalyticsPolicy record consumed by the engine

Environment Variables (all optional, prefix PLACEMENT_):
- PLACEMENT_CALENDAR_TIMEZONE: IANA zone for day/week/month bucketing (default: UTC)
- PLACEMENT_HEALTHY_MAX_DAYS: Upper bound of the Healthy risk band (default: 14)
- PLACEMENT_WATCH_MAX_DAYS: Upper bound of the Watch risk band (default: 30)
- PLACEMENT_STALE_DAYS_THRESHOLD: Manager staleness threshold (default: 90)
- PLACEMENT_NO_ACTIVITY_SENTINEL_DAYS: Days reported for undated states (default: 9999)
- PLACEMENT_CORS_ORIGINS: JSON list of allowed browser origins

Usage:
    from backend.core.config import get_settings

    settings = get_settings()
    policy = build_policy(settings, DashboardVariant.MANAGER)
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.models.enums import DashboardVariant, StalenessPolicy
from backend.models.schemas import AnalyticsPolicy, RiskBandThresholds, TopNLimits


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        calendar_timezone: IANA timezone pinning every calendar bucket.
        healthy_max_days: Days since last placement still considered Healthy.
        watch_max_days: Days since last placement still considered Watch.
        stale_days_threshold: Days since last placement at which a state is stale.
        no_activity_sentinel_days: Sentinel for states with no dated record.
        pareto_limit: Rows kept in the concentration ranking.
        seasonality_state_limit: States kept in the seasonality grid.
        momentum_state_limit: States charted in the weekly momentum series.
        momentum_weeks: Weeks in the momentum series.
        recency_row_limit: Rows kept in the recency risk ladder.
        city_drilldown_limit: Cities kept in the selected-state drilldown.
        region_state_limit: States listed per coverage region.
        state_opportunity_limit: Rows kept in the state opportunity table.
        recent_records_limit: Most recent records echoed in the result.
        cors_origins: Browser origins allowed by the CORS middleware.
    """

    model_config = SettingsConfigDict(
        env_prefix='PLACEMENT_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Calendar
    # =========================================================================

    # Daily, weekly and monthly buckets are computed in this zone, and naive
    # source dates are interpreted in it
    calendar_timezone: str = 'UTC'

    # =========================================================================
    # Recency / Staleness Policy
    # =========================================================================

    healthy_max_days: int = 14
    watch_max_days: int = 30
    stale_days_threshold: int = 90
    no_activity_sentinel_days: int = 9999

    # =========================================================================
    # Ranked View Caps
    # =========================================================================

    pareto_limit: int = 12
    seasonality_state_limit: int = 15
    momentum_state_limit: int = 5
    momentum_weeks: int = 16
    recency_row_limit: int = 15
    city_drilldown_limit: int = 10
    region_state_limit: int = 12
    state_opportunity_limit: int = 16
    recent_records_limit: int = 18

    # =========================================================================
    # HTTP
    # =========================================================================

    cors_origins: List[str] = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]


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


def build_policy(
    settings: Settings,
    variant: DashboardVariant = DashboardVariant.DASHBOARD
) -> AnalyticsPolicy:
    """
    Build the AnalyticsPolicy for a dashboard variant from settings.

    The general dashboard keeps Unknown-state records and summarizes
    staleness with the risk ladder. The manager rollup hides Unknown-state
    records by default and summarizes with the stale-days threshold.

    Args:
        settings: Loaded application settings.
        variant: Which dashboard preset to produce.

    Returns:
        AnalyticsPolicy ready to pass to the analytics engine.

    Raises:
        pydantic.ValidationError: If the configured timezone or thresholds
            are invalid.
    """
    is_manager = variant == DashboardVariant.MANAGER
    return AnalyticsPolicy(
        riskBandThresholds=RiskBandThresholds(
            healthyMaxDays=settings.healthy_max_days,
            watchMaxDays=settings.watch_max_days,
        ),
        staleDaysThreshold=settings.stale_days_threshold,
        noActivitySentinelDays=settings.no_activity_sentinel_days,
        includeUnknownStates=not is_manager,
        kpiStalenessPolicy=(
            StalenessPolicy.STALE_THRESHOLD if is_manager else StalenessPolicy.RISK_LADDER
        ),
        topNLimits=TopNLimits(
            pareto=settings.pareto_limit,
            seasonalityStates=settings.seasonality_state_limit,
            momentumStates=settings.momentum_state_limit,
            momentumWeeks=settings.momentum_weeks,
            recencyRows=settings.recency_row_limit,
            cityDrilldown=settings.city_drilldown_limit,
            regionStates=settings.region_state_limit,
            stateOpportunity=settings.state_opportunity_limit,
            recentRecords=settings.recent_records_limit,
        ),
        calendarTimezone=settings.calendar_timezone,
    )
