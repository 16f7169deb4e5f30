"""
Range and scope filtering for the analytics pipeline.

Restricts the normalized record set to the requested date window, then
applies Unknown-state inclusion and the optional single-state drill filter.

Range cutoffs relative to the reference instant:
- 30d: now - 30 days
- 90d: now - 90 days
- 12m: now - 365 days
- all: no cutoff; undated records are retained

For bounded ranges a record without a parsed date is excluded even when its
raw text exists.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from backend.models.enums import DateRange
from backend.models.schemas import PlacementRecord
from backend.services.calendar_utils import DAY_MS
from backend.services.states import is_unknown_state

RANGE_DAYS = {
    DateRange.LAST_30_DAYS: 30,
    DateRange.LAST_90_DAYS: 90,
    DateRange.LAST_12_MONTHS: 365,
}


@dataclass
class ScopedRecords:
    """
    Working sets produced by scope resolution.

    Attributes:
        range_start_ms: Cutoff instant, or None for the 'all' range.
        filtered: Range-filtered records (Unknown inclusion applied, no drill filter).
        scoped: `filtered` restricted to the selected state, if any.
        dated: The subset of `scoped` with a parsed placement date.
    """
    range_start_ms: Optional[int]
    filtered: List[PlacementRecord] = field(default_factory=list)
    scoped: List[PlacementRecord] = field(default_factory=list)
    dated: List[PlacementRecord] = field(default_factory=list)


def get_range_start_ms(date_range: DateRange, now_ms: int) -> Optional[int]:
    """
    Cutoff instant for a date range.

    Example:
        >>> get_range_start_ms(DateRange.LAST_30_DAYS, 30 * DAY_MS)
        0
        >>> get_range_start_ms(DateRange.ALL, 0) is None
        True
    """
    days = RANGE_DAYS.get(date_range)
    if days is None:
        return None
    return now_ms - days * DAY_MS


def filter_by_range(
    records: Sequence[PlacementRecord],
    range_start_ms: Optional[int]
) -> List[PlacementRecord]:
    """Keep records on or after the cutoff; keep everything when there is none."""
    if range_start_ms is None:
        return list(records)
    return [
        r for r in records
        if r.is_dated and r.placementTimestamp >= range_start_ms
    ]


def filter_unknown_states(
    records: Sequence[PlacementRecord],
    include_unknown_states: bool
) -> List[PlacementRecord]:
    if include_unknown_states:
        return list(records)
    return [r for r in records if not is_unknown_state(r.state)]


def filter_by_state(
    records: Sequence[PlacementRecord],
    selected_state: Optional[str]
) -> List[PlacementRecord]:
    if not selected_state:
        return list(records)
    return [r for r in records if r.state == selected_state]


def resolve_scope(
    records: Sequence[PlacementRecord],
    date_range: DateRange,
    now_ms: int,
    include_unknown_states: bool,
    selected_state: Optional[str] = None
) -> ScopedRecords:
    """
    Build every working set the aggregation services need.

    Args:
        records: Normalized records.
        date_range: Requested date window.
        now_ms: Reference instant in epoch milliseconds.
        include_unknown_states: Keep records whose state is Unknown.
        selected_state: Canonical state for the drill filter, or None.

    Returns:
        ScopedRecords with filtered, scoped and dated sets.
    """
    range_start_ms = get_range_start_ms(date_range, now_ms)
    filtered = filter_unknown_states(
        filter_by_range(records, range_start_ms),
        include_unknown_states,
    )
    scoped = filter_by_state(filtered, selected_state)
    dated = [r for r in scoped if r.is_dated]

    return ScopedRecords(
        range_start_ms=range_start_ms,
        filtered=filtered,
        scoped=scoped,
        dated=dated,
    )
