"""
Time-series builder for placement trends.

Buckets dated records into gap-filled calendar periods over a span, with
every bucket boundary computed in the policy's calendar timezone.

Granularities:
- Daily: every calendar day from the span start through `now`, inclusive.
  periodKey is 'YYYY-MM-DD'.
- Weekly: weeks start on Monday; periodKey is the epoch-millisecond instant
  of the Monday's local midnight. Empty weeks are emitted with 0.

Specializations:
- build_state_weekly_series: trailing N weeks for the top-K states, built
  from build_weekly_series restricted to a single-state allow-list
- build_monthly_trend: trailing 12 calendar months with a trailing
  3-month moving average
- build_weekday_pulse: placements per weekday, Monday first

Span resolution (resolve_series_start):
explicit range start, else the earliest dated record, else now - 30 days.
"""

from collections import Counter
from datetime import date, timedelta, tzinfo
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from backend.models.enums import SeriesGranularity, Weekday
from backend.models.schemas import (
    MonthlyTrendPoint,
    PlacementRecord,
    StateTotalRow,
    StateWeeklyRow,
    TrendPoint,
    WeekdayPulseRow,
)
from backend.services.calendar_utils import (
    DAY_MS,
    format_short_date,
    from_epoch_ms,
    local_midnight_ms,
    month_key,
    month_label,
    shift_month,
    start_of_week,
)

# Fallback span when neither a range start nor a dated record exists
DEFAULT_SPAN_DAYS = 30

WEEKDAYS = list(Weekday)


# =============================================================================
# Span and Bucket Helpers
# =============================================================================


def resolve_series_start(
    range_start_ms: Optional[int],
    earliest_dated_ms: Optional[int],
    now_ms: int
) -> int:
    """Start of the series span in epoch milliseconds."""
    if range_start_ms is not None:
        return range_start_ms
    if earliest_dated_ms is not None:
        return earliest_dated_ms
    return now_ms - DEFAULT_SPAN_DAYS * DAY_MS


def _local_day(record: PlacementRecord, tz: tzinfo) -> date:
    return from_epoch_ms(record.placementTimestamp, tz).date()


def _dated(
    records: Iterable[PlacementRecord],
    state_allow_list: Optional[Set[str]] = None
) -> List[PlacementRecord]:
    return [
        r for r in records
        if r.is_dated
        and (state_allow_list is None or r.state in state_allow_list)
    ]


def _iter_days(start: date, end: date, step_days: int = 1) -> Iterable[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=step_days)


# =============================================================================
# General Builders
# =============================================================================


def build_daily_series(
    records: Sequence[PlacementRecord],
    start_ms: int,
    end_ms: int,
    tz: tzinfo,
    state_allow_list: Optional[Set[str]] = None
) -> List[TrendPoint]:
    """
    Gap-filled daily series over [start, end].

    Args:
        records: Candidate records; undated ones are ignored.
        start_ms: Span start (its local calendar day is the first bucket).
        end_ms: Span end (its local calendar day is the last bucket).
        tz: Calendar timezone.
        state_allow_list: Optional set of states to count.

    Returns:
        One TrendPoint per calendar day, zero-filled.
    """
    counts: Counter = Counter(
        _local_day(r, tz) for r in _dated(records, state_allow_list)
    )
    start_day = from_epoch_ms(start_ms, tz).date()
    end_day = from_epoch_ms(end_ms, tz).date()

    return [
        TrendPoint(
            periodKey=day.isoformat(),
            periodLabel=format_short_date(day),
            placements=counts.get(day, 0),
        )
        for day in _iter_days(start_day, end_day)
    ]


def build_weekly_series(
    records: Sequence[PlacementRecord],
    start_ms: int,
    end_ms: int,
    tz: tzinfo,
    state_allow_list: Optional[Set[str]] = None
) -> List[TrendPoint]:
    """
    Gap-filled Monday-anchored weekly series over [start, end].

    Returns:
        One TrendPoint per week; periodKey is the Monday's local-midnight
        instant in epoch milliseconds.
    """
    counts: Counter = Counter(
        start_of_week(_local_day(r, tz)) for r in _dated(records, state_allow_list)
    )
    start_week = start_of_week(from_epoch_ms(start_ms, tz).date())
    end_week = start_of_week(from_epoch_ms(end_ms, tz).date())

    return [
        TrendPoint(
            periodKey=str(local_midnight_ms(monday, tz)),
            periodLabel=format_short_date(monday),
            placements=counts.get(monday, 0),
        )
        for monday in _iter_days(start_week, end_week, step_days=7)
    ]


def build_trend_series(
    records: Sequence[PlacementRecord],
    start_ms: int,
    end_ms: int,
    granularity: SeriesGranularity,
    tz: tzinfo
) -> List[TrendPoint]:
    """Dispatch to the daily or weekly builder."""
    if granularity == SeriesGranularity.WEEKLY:
        return build_weekly_series(records, start_ms, end_ms, tz)
    return build_daily_series(records, start_ms, end_ms, tz)


# =============================================================================
# Specializations
# =============================================================================


def build_state_weekly_series(
    records: Sequence[PlacementRecord],
    state_totals: Sequence[StateTotalRow],
    now_ms: int,
    tz: tzinfo,
    state_limit: int = 5,
    weeks: int = 16
) -> Tuple[List[StateWeeklyRow], List[str]]:
    """
    Trailing weekly momentum for the top states by volume.

    Args:
        records: Scoped records.
        state_totals: Ranked state totals (top `state_limit` are charted).
        now_ms: Reference instant.
        tz: Calendar timezone.
        state_limit: Number of states charted.
        weeks: Number of weeks, ending with the current week.

    Returns:
        (rows, states): one StateWeeklyRow per week with a count per charted
        state, and the charted states in rank order.
    """
    states = [row.state for row in state_totals[:state_limit]]
    current_week = start_of_week(from_epoch_ms(now_ms, tz).date())
    first_week = current_week - timedelta(weeks=weeks - 1)
    start_ms = local_midnight_ms(first_week, tz)

    per_state = {
        state: build_weekly_series(records, start_ms, now_ms, tz, state_allow_list={state})
        for state in states
    }

    rows = []
    for index, monday in enumerate(_iter_days(first_week, current_week, step_days=7)):
        rows.append(StateWeeklyRow(
            weekKey=monday.isoformat(),
            weekLabel=format_short_date(monday),
            counts={state: per_state[state][index].placements for state in states},
        ))
    return rows, states


def build_monthly_trend(
    records: Sequence[PlacementRecord],
    now_ms: int,
    tz: tzinfo,
    months: int = 12,
    window: int = 3
) -> List[MonthlyTrendPoint]:
    """
    Trailing calendar months ending with the current month.

    movingAverage averages the current and up to `window - 1` preceding
    months of the series (shorter at the start), one decimal.
    """
    current_month = from_epoch_ms(now_ms, tz).date().replace(day=1)
    buckets = [shift_month(current_month, offset) for offset in range(-(months - 1), 1)]
    counts: Counter = Counter(
        month_key(_local_day(r, tz)) for r in _dated(records)
    )

    values = [counts.get(month_key(bucket), 0) for bucket in buckets]
    points = []
    for index, bucket in enumerate(buckets):
        trailing = values[max(0, index - window + 1):index + 1]
        points.append(MonthlyTrendPoint(
            monthKey=month_key(bucket),
            monthLabel=month_label(bucket),
            placements=values[index],
            movingAverage=round(sum(trailing) / len(trailing), 1),
        ))
    return points


def build_weekday_pulse(
    records: Sequence[PlacementRecord],
    tz: tzinfo
) -> Tuple[List[WeekdayPulseRow], Optional[Weekday]]:
    """
    Placements per weekday (Monday first) and the peak weekday.

    The peak is None when there are no dated records; ties resolve to the
    earliest weekday.
    """
    counts: Counter = Counter(_local_day(r, tz).weekday() for r in _dated(records))
    rows = [
        WeekdayPulseRow(day=day, placements=counts.get(index, 0))
        for index, day in enumerate(WEEKDAYS)
    ]
    if not counts:
        return rows, None

    peak = max(rows, key=lambda row: row.placements)
    return rows, peak.day
