"""
Package initialization file for backend models.

This module exports all Pydantic schemas and enumerations from schemas.py and enums.py,
making them importable from backend.models directly.

Usage:
    from backend.models import (
        DateRange,
        AnalyticsScope,
        PlacementRecord,
        PlacementAnalytics,
        # ... etc
    )
"""

# =============================================================================
# Enums - Import and re-export all enumerations from enums.py
# =============================================================================

from backend.models.enums import (
    # Scope Enums
    DateRange,
    SeriesGranularity,
    DashboardVariant,
    # Classification Enums
    RecencyRiskBand,
    RegionName,
    StalenessPolicy,
    DataHealth,
    Weekday,
)

# =============================================================================
# Schemas - Import and re-export all Pydantic models from schemas.py
# =============================================================================

from backend.models.schemas import (
    # Input
    PlacementRecord,
    # Scope and Policy
    AnalyticsScope,
    RiskBandThresholds,
    TopNLimits,
    AnalyticsPolicy,
    # State Views
    StateTotalRow,
    StatePaceRow,
    StateGrowthRow,
    StateWeeklyRow,
    StateParetoRow,
    SeasonalityCell,
    RecencyRow,
    StaleStateRow,
    StateOpportunityRow,
    # Time Series Views
    TrendPoint,
    MonthlyTrendPoint,
    WeekdayPulseRow,
    # Geographic Views
    RegionTotalRow,
    CityHotspotRow,
    CityCountRow,
    CoverageStateRow,
    RegionCoverageRow,
    UntappedStateRow,
    # Result
    KPISet,
    PlacementAnalytics,
    # API
    PlacementAnalyticsRequest,
)


# =============================================================================
# __all__ - Public API Definition
# =============================================================================

__all__ = [
    # ----- Enums -----
    'DateRange',
    'SeriesGranularity',
    'DashboardVariant',
    'RecencyRiskBand',
    'RegionName',
    'StalenessPolicy',
    'DataHealth',
    'Weekday',
    # ----- Schemas -----
    'PlacementRecord',
    'AnalyticsScope',
    'RiskBandThresholds',
    'TopNLimits',
    'AnalyticsPolicy',
    'StateTotalRow',
    'StatePaceRow',
    'StateGrowthRow',
    'StateWeeklyRow',
    'StateParetoRow',
    'SeasonalityCell',
    'RecencyRow',
    'StaleStateRow',
    'StateOpportunityRow',
    'TrendPoint',
    'MonthlyTrendPoint',
    'WeekdayPulseRow',
    'RegionTotalRow',
    'CityHotspotRow',
    'CityCountRow',
    'CoverageStateRow',
    'RegionCoverageRow',
    'UntappedStateRow',
    'KPISet',
    'PlacementAnalytics',
    'PlacementAnalyticsRequest',
]
