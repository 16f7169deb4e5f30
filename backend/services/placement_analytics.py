"""
Placement analytics pipeline.

Single entry point that turns a flat collection of placement records into
every derived view driving the dashboards, parameterized by an explicit
AnalyticsPolicy instead of one pipeline per dashboard.

Flow:
    Normalizer -> Canonicalizer -> Range/Scope filter
        -> {state/city totals, time series, pace/growth, Pareto,
            seasonality, recency, regional rollup}  (independent)
        -> KPI summarizer -> PlacementAnalytics

Properties:
- Pure: no I/O, no shared state, no clock access; `now` is a parameter
- Deterministic: identical (records, scope, policy, now) yield identical output
- Never raises for malformed records; degradation shows up only in the
  KPI data-quality counters and in empty/zeroed rows

Key Functions:
- build_placement_analytics: Run the pipeline over normalized records
- analyze_placement_payload: Normalize a raw decoded payload, then run it
"""

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from backend.models.schemas import AnalyticsPolicy, AnalyticsScope, PlacementAnalytics, PlacementRecord
from backend.services.aggregation import (
    build_city_drilldown,
    build_city_hotspots,
    build_region_totals,
    build_state_opportunity,
    build_state_totals,
    tally_placements,
)
from backend.services.calendar_utils import ensure_aware, to_epoch_ms
from backend.services.growth import (
    build_state_growth,
    build_state_pace,
    build_state_pareto,
    count_pace_windows,
)
from backend.services.kpis import build_kpis
from backend.services.normalization import normalize_placement_metrics
from backend.services.recency import (
    build_recency_risk,
    build_stale_states,
    collect_state_activity,
)
from backend.services.regional_rollup import build_coverage, build_untapped_states
from backend.services.scoping import filter_by_state, filter_unknown_states, resolve_scope
from backend.services.seasonality import build_seasonality_grid
from backend.services.time_series import (
    build_monthly_trend,
    build_state_weekly_series,
    build_trend_series,
    build_weekday_pulse,
    resolve_series_start,
)

# Configure module logger
logger = logging.getLogger(__name__)


def build_placement_analytics(
    records: Sequence[PlacementRecord],
    scope: AnalyticsScope,
    now: datetime,
    policy: Optional[AnalyticsPolicy] = None
) -> PlacementAnalytics:
    """
    Compute every derived view for one scope.

    Args:
        records: Normalized placement records (treated as read-only).
        scope: Date range, granularity, drill filter and Unknown inclusion.
        now: Reference instant; naive values are read in the policy timezone.
        policy: Thresholds, caps and timezone; defaults to AnalyticsPolicy().

    Returns:
        PlacementAnalytics result object.

    Example:
        >>> result = build_placement_analytics(
        ...     records,
        ...     AnalyticsScope(dateRange=DateRange.LAST_30_DAYS),
        ...     now=datetime(2026, 10, 18, tzinfo=timezone.utc),
        ... )
        >>> result.kpis.scopedPlacements
        2
    """
    policy = policy or AnalyticsPolicy()
    tz = policy.tz
    limits = policy.topNLimits
    now = ensure_aware(now, tz)
    now_ms = to_epoch_ms(now)

    include_unknown = (
        scope.includeUnknownStates
        if scope.includeUnknownStates is not None
        else policy.includeUnknownStates
    )
    selected_state = scope.selectedState

    logger.debug(
        f"Resolving scope: range={scope.dateRange.value}, granularity={scope.granularity.value}, "
        f"selected_state={selected_state}, include_unknown={include_unknown}"
    )

    working = resolve_scope(
        records,
        date_range=scope.dateRange,
        now_ms=now_ms,
        include_unknown_states=include_unknown,
        selected_state=selected_state,
    )

    # -------------------------------------------------------------------------
    # State / city totals
    # -------------------------------------------------------------------------
    tally = tally_placements(working.scoped)
    state_totals = build_state_totals(tally)
    top_cities = build_city_hotspots(tally, limit=limits.topCities)
    region_totals = build_region_totals(tally)
    city_drilldown = build_city_drilldown(working.filtered, selected_state, limit=limits.cityDrilldown)
    state_opportunity = build_state_opportunity(
        working.filtered,
        now_ms=now_ms,
        sentinel_days=policy.noActivitySentinelDays,
        limit=limits.stateOpportunity,
    )

    # -------------------------------------------------------------------------
    # Time series
    # -------------------------------------------------------------------------
    earliest_ms = min((r.placementTimestamp for r in working.dated), default=None)
    series_start_ms = resolve_series_start(working.range_start_ms, earliest_ms, now_ms)
    trend = build_trend_series(working.dated, series_start_ms, now_ms, scope.granularity, tz)
    weekly_rows, weekly_states = build_state_weekly_series(
        working.dated,
        state_totals,
        now_ms=now_ms,
        tz=tz,
        state_limit=limits.momentumStates,
        weeks=limits.momentumWeeks,
    )
    monthly_trend = build_monthly_trend(working.dated, now_ms, tz)
    weekday_pulse, peak_weekday = build_weekday_pulse(working.dated, tz)

    # -------------------------------------------------------------------------
    # Pace, growth and concentration
    # -------------------------------------------------------------------------
    recent, prior = count_pace_windows(working.dated, now_ms)
    state_pace = build_state_pace(state_totals, recent)
    state_growth = build_state_growth(state_totals, recent, prior)
    state_pareto = build_state_pareto(state_totals, tally.total, limit=limits.pareto)

    # -------------------------------------------------------------------------
    # Seasonality
    # -------------------------------------------------------------------------
    seasonality = build_seasonality_grid(
        working.dated,
        state_totals,
        now_ms=now_ms,
        tz=tz,
        state_limit=limits.seasonalityStates,
    )

    # -------------------------------------------------------------------------
    # Recency and staleness (all time, not range-filtered)
    # -------------------------------------------------------------------------
    all_time = filter_by_state(filter_unknown_states(records, include_unknown), selected_state)
    activity = collect_state_activity(all_time)
    recency_all = build_recency_risk(
        activity,
        now_ms=now_ms,
        thresholds=policy.riskBandThresholds,
        sentinel_days=policy.noActivitySentinelDays,
        tz=tz,
    )
    stale_states = build_stale_states(
        activity,
        now_ms=now_ms,
        stale_days_threshold=policy.staleDaysThreshold,
        sentinel_days=policy.noActivitySentinelDays,
        tz=tz,
    )

    # -------------------------------------------------------------------------
    # Regional rollup
    # -------------------------------------------------------------------------
    coverage = build_coverage(tally.state_counts, state_limit=limits.regionStates)
    untapped = build_untapped_states(tally.state_counts)

    # -------------------------------------------------------------------------
    # KPIs
    # -------------------------------------------------------------------------
    kpis = build_kpis(
        scoped=working.scoped,
        all_records=records,
        state_totals=state_totals,
        region_totals=region_totals,
        top_cities=top_cities,
        recency_rows=recency_all,
        stale_rows=stale_states,
        untapped=untapped,
        staleness_policy=policy.kpiStalenessPolicy,
        range_start_ms=working.range_start_ms,
        now_ms=now_ms,
        tz=tz,
    )

    logger.info(
        f"Placement analytics computed: {len(records)} records, "
        f"{len(working.scoped)} in scope, {len(state_totals)} states"
    )

    return PlacementAnalytics(
        generatedAt=now,
        scope=scope,
        selectedState=selected_state,
        scopedRecordCount=len(working.scoped),
        stateTotals=state_totals,
        statePace=state_pace,
        stateGrowth30d=state_growth,
        stateWeeklySeries16w=weekly_rows,
        weeklySeriesStates=weekly_states,
        statePareto=state_pareto,
        stateSeasonality12m=seasonality.cells,
        stateSeasonalityStates=seasonality.states,
        stateSeasonalityMonths=seasonality.months,
        stateRecencyRisk=recency_all[:limits.recencyRows],
        staleStates=stale_states,
        stateOpportunity=state_opportunity,
        trend=trend,
        monthlyTrend=monthly_trend,
        weekdayPulse=weekday_pulse,
        peakWeekday=peak_weekday,
        regionTotals=region_totals,
        topCities=top_cities,
        cityDrilldown=city_drilldown,
        coverage=coverage,
        untappedStates=untapped,
        recentPlacements=list(working.scoped[:limits.recentRecords]),
        kpis=kpis,
    )


def analyze_placement_payload(
    payload: Any,
    scope: AnalyticsScope,
    now: datetime,
    policy: Optional[AnalyticsPolicy] = None
) -> PlacementAnalytics:
    """
    Normalize a raw decoded feed payload and run the pipeline over it.

    Args:
        payload: Decoded JSON from the placement metrics endpoint.
        scope: Scope parameters.
        now: Reference instant.
        policy: Optional policy record.

    Returns:
        PlacementAnalytics result object.
    """
    policy = policy or AnalyticsPolicy()
    records = normalize_placement_metrics(payload, policy.tz)
    return build_placement_analytics(records, scope, now, policy)
