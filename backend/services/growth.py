"""
Pace, growth-rate and concentration (Pareto) calculations.

Pace/Growth (per state):
- recent = dated records with timestamp >= now - 30d
- prior  = dated records with timestamp in [now - 60d, now - 30d)
- growthPct:
    recent == 0 and prior == 0  ->  0
    prior == 0                  ->  100  (state newly appeared)
    otherwise                   ->  clamp((recent - prior) / prior * 100, -100, 300)
  rounded to one decimal; growthDelta = recent - prior

Concentration:
States ranked by descending placements (top N), each row carrying the
running cumulative share of the scoped total. An empty scope yields zero
shares throughout.
"""

from collections import Counter
from typing import List, Sequence, Tuple

from backend.models.schemas import (
    PlacementRecord,
    StateGrowthRow,
    StatePaceRow,
    StateParetoRow,
    StateTotalRow,
)
from backend.services.aggregation import compute_share
from backend.services.calendar_utils import DAY_MS

# Growth percentages are bounded to suppress small-denominator outliers
GROWTH_PCT_MIN = -100.0
GROWTH_PCT_MAX = 300.0

# Growth percentage reported for a state with recent but no prior activity
NEW_STATE_GROWTH_PCT = 100.0

PACE_WINDOW_DAYS = 30


def clamp_growth(value: float) -> float:
    return max(GROWTH_PCT_MIN, min(GROWTH_PCT_MAX, value))


def compute_growth_pct(recent: int, prior: int) -> float:
    """
    Guarded growth percentage of `recent` over `prior`.

    Example:
        >>> compute_growth_pct(0, 0)
        0.0
        >>> compute_growth_pct(3, 0)
        100.0
        >>> compute_growth_pct(1, 10)
        -90.0
        >>> compute_growth_pct(50, 1)
        300.0
    """
    if prior == 0:
        return 0.0 if recent == 0 else NEW_STATE_GROWTH_PCT
    return round(clamp_growth((recent - prior) / prior * 100), 1)


def count_pace_windows(
    records: Sequence[PlacementRecord],
    now_ms: int,
    window_days: int = PACE_WINDOW_DAYS
) -> Tuple[Counter, Counter]:
    """
    Count dated records per state in the recent and prior windows.

    Returns:
        (recent_counts, prior_counts) keyed by state.
    """
    recent_start = now_ms - window_days * DAY_MS
    prior_start = now_ms - 2 * window_days * DAY_MS

    recent: Counter = Counter()
    prior: Counter = Counter()
    for record in records:
        if not record.is_dated:
            continue
        if record.placementTimestamp >= recent_start:
            recent[record.state] += 1
        elif record.placementTimestamp >= prior_start:
            prior[record.state] += 1
    return recent, prior


def build_state_pace(
    state_totals: Sequence[StateTotalRow],
    recent: Counter
) -> List[StatePaceRow]:
    """Trailing-30-day counts for every scoped state, descending, then by name."""
    rows = [
        StatePaceRow(state=row.state, placements30d=recent.get(row.state, 0))
        for row in state_totals
    ]
    return sorted(rows, key=lambda row: (-row.placements30d, row.state))


def build_state_growth(
    state_totals: Sequence[StateTotalRow],
    recent: Counter,
    prior: Counter
) -> List[StateGrowthRow]:
    """
    Growth rows for every scoped state.

    Ordered by descending recent placements, then state name.
    """
    rows = []
    for total in state_totals:
        recent_count = recent.get(total.state, 0)
        prior_count = prior.get(total.state, 0)
        rows.append(StateGrowthRow(
            state=total.state,
            recentPlacements=recent_count,
            priorPlacements=prior_count,
            growthPct=compute_growth_pct(recent_count, prior_count),
            growthDelta=recent_count - prior_count,
            totalPlacements=total.placements,
        ))
    return sorted(rows, key=lambda row: (-row.recentPlacements, row.state))


def build_state_pareto(
    state_totals: Sequence[StateTotalRow],
    scoped_total: int,
    limit: int = 12
) -> List[StateParetoRow]:
    """
    Concentration ranking with running cumulative share.

    Args:
        state_totals: State totals (re-sorted here by descending placements, then name).
        scoped_total: Scoped record count used as the share denominator.
        limit: Number of rows kept.

    Returns:
        Rows whose cumulativeShare is non-decreasing.
    """
    ranked = sorted(state_totals, key=lambda row: (-row.placements, row.state))[:limit]

    running = 0
    rows = []
    for row in ranked:
        running += row.placements
        rows.append(StateParetoRow(
            state=row.state,
            placements=row.placements,
            share=compute_share(row.placements, scoped_total),
            cumulativeShare=compute_share(running, scoped_total),
        ))
    return rows
