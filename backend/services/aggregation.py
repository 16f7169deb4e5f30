"""
State and city aggregation service.

Single pass over the scoped record set accumulating per-state counts,
per-(city, state) counts, per-region counts and the most recent dated
timestamp per state. Derived rows carry a share of the scoped total,
rounded to one decimal place; an empty scope yields share 0.

Ordering:
Every ranked view sorts by descending count with an explicit alphabetical
secondary key, so output order never depends on feed order.

Key Functions:
- tally_placements: Single-pass accumulation
- compute_share: Zero-guarded percentage
- build_state_totals: StateTotalRow list
- build_city_hotspots: CityHotspotRow list
- build_city_drilldown: Top cities for a selected state
- build_region_totals: RegionTotalRow list in fixed region order
- build_state_opportunity: Spread, freshness and density per state
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from backend.models.enums import RegionName
from backend.models.schemas import (
    CityCountRow,
    CityHotspotRow,
    PlacementRecord,
    RegionTotalRow,
    StateOpportunityRow,
    StateTotalRow,
)
from backend.services.calendar_utils import DAY_MS
from backend.services.regions import REGION_ORDER, region_for_state


@dataclass
class PlacementTally:
    """
    Accumulated counts for one record set.

    Counters preserve first-seen insertion order; ranked views re-sort with
    explicit keys.
    """
    total: int = 0
    state_counts: Counter = field(default_factory=Counter)
    city_counts: Counter = field(default_factory=Counter)
    region_counts: Counter = field(default_factory=Counter)
    state_latest_ms: Dict[str, int] = field(default_factory=dict)


def compute_share(count: int, total: int, digits: int = 1) -> float:
    """
    Percentage of `total`, rounded; 0 when `total` is 0.

    Example:
        >>> compute_share(1, 3)
        33.3
        >>> compute_share(5, 0)
        0.0
    """
    if total == 0:
        return 0.0
    return round(count / total * 100, digits)


def tally_placements(records: Sequence[PlacementRecord]) -> PlacementTally:
    """
    Accumulate state, city and region counts in a single pass.

    Args:
        records: Scoped records.

    Returns:
        PlacementTally over `records`.
    """
    tally = PlacementTally(total=len(records))
    for record in records:
        tally.state_counts[record.state] += 1
        tally.city_counts[(record.city, record.state)] += 1
        tally.region_counts[region_for_state(record.state)] += 1
        if record.is_dated:
            latest = tally.state_latest_ms.get(record.state)
            if latest is None or record.placementTimestamp > latest:
                tally.state_latest_ms[record.state] = record.placementTimestamp
    return tally


def build_state_totals(tally: PlacementTally) -> List[StateTotalRow]:
    """
    Per-state totals ordered by descending placements, then state name.

    The sum of `placements` over the returned rows equals `tally.total`.
    """
    ranked = sorted(tally.state_counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [
        StateTotalRow(
            state=state,
            placements=count,
            share=compute_share(count, tally.total),
        )
        for state, count in ranked
    ]


def build_city_hotspots(
    tally: PlacementTally,
    limit: Optional[int] = None
) -> List[CityHotspotRow]:
    """
    Per-(city, state) totals ordered by descending placements, then city, then state.
    """
    ranked = sorted(
        tally.city_counts.items(),
        key=lambda kv: (-kv[1], kv[0][0], kv[0][1]),
    )
    if limit is not None:
        ranked = ranked[:limit]

    return [
        CityHotspotRow(
            city=city,
            state=state,
            region=region_for_state(state),
            label=f"{city}, {state}",
            placements=count,
            share=compute_share(count, tally.total),
        )
        for (city, state), count in ranked
    ]


def build_city_drilldown(
    records: Sequence[PlacementRecord],
    selected_state: Optional[str],
    limit: int = 10
) -> List[CityCountRow]:
    """
    Top cities of the selected state over the range-filtered set.

    Returns an empty list when no state is selected.
    """
    if not selected_state:
        return []

    counts: Counter = Counter(r.city for r in records if r.state == selected_state)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
    return [CityCountRow(city=city, placements=count) for city, count in ranked]


def build_region_totals(tally: PlacementTally) -> List[RegionTotalRow]:
    """
    Region totals in fixed region order.

    The Unknown region is only reported when it holds placements.
    """
    rows = []
    for region in REGION_ORDER:
        placements = tally.region_counts.get(region, 0)
        if region == RegionName.UNKNOWN and placements == 0:
            continue
        rows.append(RegionTotalRow(
            region=region,
            placements=placements,
            share=compute_share(placements, tally.total),
        ))
    return rows


def build_state_opportunity(
    records: Sequence[PlacementRecord],
    now_ms: int,
    sentinel_days: int,
    limit: int = 16
) -> List[StateOpportunityRow]:
    """
    Spread, freshness and density per state.

    - citySpread: distinct cities with at least one placement
    - freshnessDays: whole days since the latest dated placement (rounded),
      or `sentinel_days` when the state has no dated record
    - density: placements per distinct city, two decimals

    Args:
        records: Range-filtered records (not restricted by the drill filter).
        now_ms: Reference instant in epoch milliseconds.
        sentinel_days: Freshness reported for undated states.
        limit: Maximum rows returned.

    Returns:
        Rows ordered by descending placements, then state name.
    """
    placements: Counter = Counter()
    cities: Dict[str, Set[str]] = {}
    latest: Dict[str, int] = {}

    for record in records:
        placements[record.state] += 1
        cities.setdefault(record.state, set()).add(record.city)
        if record.is_dated and (
            record.state not in latest or record.placementTimestamp > latest[record.state]
        ):
            latest[record.state] = record.placementTimestamp

    rows: List[Tuple[str, int]] = sorted(placements.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]

    result = []
    for state, count in rows:
        spread = len(cities.get(state, ()))
        latest_ms = latest.get(state)
        freshness = (
            max(0, round((now_ms - latest_ms) / DAY_MS))
            if latest_ms is not None
            else sentinel_days
        )
        result.append(StateOpportunityRow(
            state=state,
            placements=count,
            citySpread=spread,
            freshnessDays=freshness,
            density=round(count / spread, 2) if spread else float(count),
        ))
    return result
