"""
Recency and staleness classification service.

Measures whole days since each state's last dated placement over ALL
records, independent of the active date range, so that narrowing the
viewing window never makes a state look stale.

daysSinceLastPlacement = floor((now - last) / day), floored at 0 for
future-dated records, or the policy sentinel when the state has no dated
record. Sentinel states therefore always sort as most stale.

Two independent banding policies:
- Risk ladder (general dashboard): Healthy <= healthyMaxDays,
  Watch <= watchMaxDays, otherwise At Risk.
- Staleness (manager rollup): only states with
  daysSinceLastPlacement >= staleDaysThreshold are listed.
"""

from dataclasses import dataclass
from datetime import tzinfo
from typing import Dict, List, Optional, Sequence

from backend.models.enums import RecencyRiskBand
from backend.models.schemas import (
    PlacementRecord,
    RecencyRow,
    RiskBandThresholds,
    StaleStateRow,
)
from backend.services.calendar_utils import DAY_MS, format_long_date, from_epoch_ms
from backend.services.regions import region_for_state


@dataclass
class StateActivity:
    """All-time activity summary for one state."""
    state: str
    total: int = 0
    last_ms: Optional[int] = None


def collect_state_activity(records: Sequence[PlacementRecord]) -> Dict[str, StateActivity]:
    """
    Total placements and latest dated placement per state.

    Returns:
        Mapping of state to StateActivity, in first-seen order.
    """
    activity: Dict[str, StateActivity] = {}
    for record in records:
        entry = activity.setdefault(record.state, StateActivity(state=record.state))
        entry.total += 1
        if not record.is_dated:
            continue
        if entry.last_ms is None or record.placementTimestamp > entry.last_ms:
            entry.last_ms = record.placementTimestamp
    return activity


def days_since(now_ms: int, last_ms: Optional[int], sentinel_days: int) -> int:
    """
    Whole days elapsed since `last_ms`.

    Example:
        >>> days_since(10 * DAY_MS, 0, 9999)
        10
        >>> days_since(10 * DAY_MS, None, 9999)
        9999
    """
    if last_ms is None:
        return sentinel_days
    return max(0, (now_ms - last_ms) // DAY_MS)


def classify_risk_band(days: int, thresholds: RiskBandThresholds) -> RecencyRiskBand:
    """
    Map days since last placement onto the risk ladder.

    Example:
        >>> classify_risk_band(14, RiskBandThresholds())
        <RecencyRiskBand.HEALTHY: 'Healthy'>
        >>> classify_risk_band(15, RiskBandThresholds())
        <RecencyRiskBand.WATCH: 'Watch'>
        >>> classify_risk_band(31, RiskBandThresholds())
        <RecencyRiskBand.AT_RISK: 'At Risk'>
    """
    if days <= thresholds.healthyMaxDays:
        return RecencyRiskBand.HEALTHY
    if days <= thresholds.watchMaxDays:
        return RecencyRiskBand.WATCH
    return RecencyRiskBand.AT_RISK


def _last_label(entry: StateActivity, tz: tzinfo) -> str:
    if entry.last_ms is None:
        return "No dated records"
    return format_long_date(from_epoch_ms(entry.last_ms, tz))


def build_recency_risk(
    activity: Dict[str, StateActivity],
    now_ms: int,
    thresholds: RiskBandThresholds,
    sentinel_days: int,
    tz: tzinfo,
    limit: Optional[int] = None
) -> List[RecencyRow]:
    """
    Risk-ladder rows, most stale first, then by state name.

    Args:
        activity: All-time activity per state.
        now_ms: Reference instant.
        thresholds: Healthy/Watch band bounds.
        sentinel_days: Days reported for undated states.
        tz: Calendar timezone for labels.
        limit: Optional row cap applied after sorting.

    Returns:
        List of RecencyRow.
    """
    rows = []
    for entry in activity.values():
        days = days_since(now_ms, entry.last_ms, sentinel_days)
        rows.append(RecencyRow(
            state=entry.state,
            daysSinceLastPlacement=days,
            riskBand=classify_risk_band(days, thresholds),
            totalPlacements=entry.total,
            lastPlacementLabel=_last_label(entry, tz),
        ))

    rows.sort(key=lambda row: (-row.daysSinceLastPlacement, row.state))
    return rows[:limit] if limit is not None else rows


def build_stale_states(
    activity: Dict[str, StateActivity],
    now_ms: int,
    stale_days_threshold: int,
    sentinel_days: int,
    tz: tzinfo
) -> List[StaleStateRow]:
    """
    States at or beyond the stale-days threshold, most stale first.

    States below the threshold are excluded entirely.
    """
    rows = []
    for entry in activity.values():
        days = days_since(now_ms, entry.last_ms, sentinel_days)
        if days < stale_days_threshold:
            continue
        rows.append(StaleStateRow(
            state=entry.state,
            region=region_for_state(entry.state),
            totalPlacements=entry.total,
            daysSinceLastPlacement=days,
            lastPlacementLabel=_last_label(entry, tz),
        ))

    rows.sort(key=lambda row: (-row.daysSinceLastPlacement, row.state))
    return rows


def count_at_risk(rows: Sequence[RecencyRow]) -> int:
    return sum(1 for row in rows if row.riskBand == RecencyRiskBand.AT_RISK)
