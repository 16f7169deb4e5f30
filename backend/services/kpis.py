"""
KPI summarizer for placement analytics.

Scalar headline metrics are drawn from the already-derived views rather than
recomputed independently, so the headline numbers always agree with the
tables and charts beneath them.

KPIs:
- scopedPlacements, activeStates (non-zero, non-Unknown), activeRegions
- topState / topStateShare: first state-total row that is not Unknown
- topCity: first city hotspot label
- medianPlacementsPerState: standard median of per-state counts, one decimal
- staleStateCount: At Risk states or stale-threshold states, per policy
- untappedStatesCount
- placementsLast7d, placementsThisMonth
- avgPlacementsPerDay = scopedPlacements / max(1, dayCount), two decimals
- latestPlacementDate / latestPlacementRaw
- invalidDateRecords, unknownStateRecords, dataHealth
"""

import math
from datetime import datetime, tzinfo
from typing import Optional, Sequence, Tuple

import numpy as np

from backend.models.enums import DataHealth, RegionName, StalenessPolicy
from backend.models.schemas import (
    CityHotspotRow,
    KPISet,
    PlacementRecord,
    RecencyRow,
    RegionTotalRow,
    StaleStateRow,
    StateTotalRow,
    UntappedStateRow,
)
from backend.services.calendar_utils import DAY_MS, from_epoch_ms
from backend.services.recency import count_at_risk
from backend.services.states import is_unknown_state

LAST_WEEK_DAYS = 7


def median_placements(values: Sequence[int]) -> float:
    """
    Standard median rounded to one decimal; 0 for an empty list.

    Example:
        >>> median_placements([1, 2, 3, 4])
        2.5
        >>> median_placements([5, 5, 5])
        5.0
        >>> median_placements([])
        0.0
    """
    if len(values) == 0:
        return 0.0
    return round(float(np.median(np.asarray(values, dtype=float))), 1)


def compute_average_per_day(
    scoped_placements: int,
    range_start_ms: Optional[int],
    earliest_dated_ms: Optional[int],
    now_ms: int
) -> float:
    """
    Average placements per day over the scope's span.

    The day count comes from the explicit range start, else the earliest
    dated record, else 1; it is never below 1.

    Example:
        >>> compute_average_per_day(60, 0, None, 30 * DAY_MS)
        2.0
        >>> compute_average_per_day(5, None, None, 0)
        5.0
    """
    span_start = range_start_ms if range_start_ms is not None else earliest_dated_ms
    if span_start is None:
        day_count = 1
    else:
        day_count = max(1, math.ceil((now_ms - span_start) / DAY_MS))
    return round(scoped_placements / day_count, 2)


def count_data_quality(records: Sequence[PlacementRecord]) -> Tuple[int, int]:
    """
    Count degraded records.

    Returns:
        (invalid_date_records, unknown_state_records)
    """
    invalid_dates = sum(1 for r in records if not r.is_dated)
    unknown_states = sum(1 for r in records if is_unknown_state(r.state))
    return invalid_dates, unknown_states


def find_latest_placement(records: Sequence[PlacementRecord]) -> Tuple[Optional[datetime], str]:
    """
    Latest dated placement and its raw text.

    Without any dated record, the first non-empty raw text stands in so the
    dashboard can still show what the feed contained.
    """
    latest: Optional[PlacementRecord] = None
    for record in records:
        if not record.is_dated:
            continue
        if latest is None or record.placementTimestamp > latest.placementTimestamp:
            latest = record

    if latest is not None:
        return latest.placementDate, latest.placementDateRaw

    fallback = next((r.placementDateRaw for r in records if r.placementDateRaw), "")
    return None, fallback


def build_kpis(
    scoped: Sequence[PlacementRecord],
    all_records: Sequence[PlacementRecord],
    state_totals: Sequence[StateTotalRow],
    region_totals: Sequence[RegionTotalRow],
    top_cities: Sequence[CityHotspotRow],
    recency_rows: Sequence[RecencyRow],
    stale_rows: Sequence[StaleStateRow],
    untapped: Sequence[UntappedStateRow],
    staleness_policy: StalenessPolicy,
    range_start_ms: Optional[int],
    now_ms: int,
    tz: tzinfo
) -> KPISet:
    """
    Summarize the derived views into a KPISet.

    Args:
        scoped: Scoped records.
        all_records: Full normalized input (data-quality counters).
        state_totals: Ranked state totals.
        region_totals: Region totals.
        top_cities: Ranked city hotspots.
        recency_rows: Uncapped risk-ladder rows.
        stale_rows: Stale-threshold rows.
        untapped: Untapped states.
        staleness_policy: Which staleness rule feeds staleStateCount.
        range_start_ms: Explicit range start, or None.
        now_ms: Reference instant.
        tz: Calendar timezone.

    Returns:
        KPISet.
    """
    known_states = [row for row in state_totals if not is_unknown_state(row.state) and row.placements > 0]
    top = known_states[0] if known_states else None

    dated = [r for r in scoped if r.is_dated]
    earliest_ms = min((r.placementTimestamp for r in dated), default=None)
    week_start = now_ms - LAST_WEEK_DAYS * DAY_MS
    current_month = from_epoch_ms(now_ms, tz).strftime("%Y-%m")
    this_month = sum(
        1 for r in dated
        if from_epoch_ms(r.placementTimestamp, tz).strftime("%Y-%m") == current_month
    )

    if staleness_policy == StalenessPolicy.STALE_THRESHOLD:
        stale_count = len(stale_rows)
    else:
        stale_count = count_at_risk(recency_rows)

    latest_date, latest_raw = find_latest_placement(scoped)
    invalid_dates, unknown_states = count_data_quality(all_records)

    return KPISet(
        scopedPlacements=len(scoped),
        activeStates=len(known_states),
        activeRegions=sum(
            1 for row in region_totals
            if row.region != RegionName.UNKNOWN and row.placements > 0
        ),
        topState=top.state if top else None,
        topStateShare=top.share if top else 0.0,
        topCity=top_cities[0].label if top_cities else None,
        medianPlacementsPerState=median_placements([row.placements for row in state_totals]),
        staleStateCount=stale_count,
        untappedStatesCount=len(untapped),
        placementsLast7d=sum(1 for r in dated if r.placementTimestamp >= week_start),
        placementsThisMonth=this_month,
        avgPlacementsPerDay=compute_average_per_day(len(scoped), range_start_ms, earliest_ms, now_ms),
        latestPlacementDate=latest_date,
        latestPlacementRaw=latest_raw,
        invalidDateRecords=invalid_dates,
        unknownStateRecords=unknown_states,
        dataHealth=DataHealth.OK if invalid_dates == 0 and unknown_states == 0 else DataHealth.ISSUE,
    )
