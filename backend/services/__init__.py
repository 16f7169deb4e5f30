"""
Backend Services Module

This module contains all business logic services for the Placement Analytics
engine. Each service is a stateless, pure function over immutable input.

Services:
- states: State canonicalization (51-member enumeration + Unknown)
- regions: Fixed state-to-region taxonomy
- normalization: Feed item to PlacementRecord coercion
- scoping: Date-range, Unknown-state and drill filtering
- aggregation: State/city/region totals and shares
- time_series: Gap-filled daily/weekly/monthly series
- growth: Pace, guarded growth rates and Pareto concentration
- seasonality: State x month intensity grid
- recency: Recency risk ladder and staleness list
- regional_rollup: Region coverage and untapped states
- kpis: Headline KPI summarizer
- placement_analytics: Pipeline orchestration

All services are designed to be consumed by the API layer (backend/api/).
"""

# =============================================================================
# Canonicalization Exports
# State token canonicalization and the fixed region taxonomy
# =============================================================================

from backend.services.states import (
    ALL_STATE_NAMES,
    UNKNOWN_STATE,
    normalize_state,
    is_unknown_state,
    state_abbreviation,
)
from backend.services.regions import (
    REGION_ORDER,
    region_for_state,
)

# =============================================================================
# Normalization and Scoping Exports
# Feed item coercion, date parsing, and scope resolution
# =============================================================================

from backend.services.normalization import (
    normalize_placement_metrics,
    normalize_placement_record,
    parse_placement_date,
)
from backend.services.scoping import (
    get_range_start_ms,
    filter_by_range,
    resolve_scope,
)

# =============================================================================
# Aggregation Exports
# Per-state, per-city and per-region totals with zero-guarded shares
# =============================================================================

from backend.services.aggregation import (
    compute_share,
    tally_placements,
    build_state_totals,
    build_city_hotspots,
    build_city_drilldown,
    build_region_totals,
    build_state_opportunity,
)

# =============================================================================
# Time Series Exports
# Calendar-aware, gap-filled trend series
# =============================================================================

from backend.services.time_series import (
    build_daily_series,
    build_weekly_series,
    build_trend_series,
    build_state_weekly_series,
    build_monthly_trend,
    build_weekday_pulse,
)

# =============================================================================
# Growth, Concentration and Seasonality Exports
# =============================================================================

from backend.services.growth import (
    compute_growth_pct,
    build_state_pace,
    build_state_growth,
    build_state_pareto,
)
from backend.services.seasonality import build_seasonality_grid

# =============================================================================
# Recency and Regional Rollup Exports
# =============================================================================

from backend.services.recency import (
    classify_risk_band,
    build_recency_risk,
    build_stale_states,
)
from backend.services.regional_rollup import (
    build_coverage,
    build_untapped_states,
)

# =============================================================================
# KPI and Pipeline Exports
# =============================================================================

from backend.services.kpis import (
    median_placements,
    compute_average_per_day,
    build_kpis,
)
from backend.services.placement_analytics import (
    build_placement_analytics,
    analyze_placement_payload,
)

# =============================================================================
# __all__ - Public API Definition
# =============================================================================

__all__ = [
    # ----- Canonicalization -----
    'ALL_STATE_NAMES',
    'UNKNOWN_STATE',
    'normalize_state',
    'is_unknown_state',
    'state_abbreviation',
    'REGION_ORDER',
    'region_for_state',
    # ----- Normalization and Scoping -----
    'normalize_placement_metrics',
    'normalize_placement_record',
    'parse_placement_date',
    'get_range_start_ms',
    'filter_by_range',
    'resolve_scope',
    # ----- Aggregation -----
    'compute_share',
    'tally_placements',
    'build_state_totals',
    'build_city_hotspots',
    'build_city_drilldown',
    'build_region_totals',
    'build_state_opportunity',
    # ----- Time Series -----
    'build_daily_series',
    'build_weekly_series',
    'build_trend_series',
    'build_state_weekly_series',
    'build_monthly_trend',
    'build_weekday_pulse',
    # ----- Growth, Concentration and Seasonality -----
    'compute_growth_pct',
    'build_state_pace',
    'build_state_growth',
    'build_state_pareto',
    'build_seasonality_grid',
    # ----- Recency and Regional Rollup -----
    'classify_risk_band',
    'build_recency_risk',
    'build_stale_states',
    'build_coverage',
    'build_untapped_states',
    # ----- KPIs and Pipeline -----
    'median_placements',
    'compute_average_per_day',
    'build_kpis',
    'build_placement_analytics',
    'analyze_placement_payload',
]
