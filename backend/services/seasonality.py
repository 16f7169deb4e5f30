"""
Seasonality grid builder.

Cross-tabulates the top states by scoped volume against the trailing 12
calendar months ending with the current month. The grid is dense, one cell
per (state, month) including zeros, to support a fixed-size heatmap.

intensity = placements / grid max, three decimals; a grid whose largest
cell is 0 reports intensity 0 everywhere.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import List, Sequence

from backend.models.schemas import PlacementRecord, SeasonalityCell, StateTotalRow
from backend.services.calendar_utils import from_epoch_ms, month_key, month_label, shift_month

SEASONALITY_MONTHS = 12


@dataclass
class SeasonalityGrid:
    """Dense heatmap cells plus the row and column labels in render order."""
    cells: List[SeasonalityCell] = field(default_factory=list)
    states: List[str] = field(default_factory=list)
    months: List[str] = field(default_factory=list)


def build_seasonality_grid(
    records: Sequence[PlacementRecord],
    state_totals: Sequence[StateTotalRow],
    now_ms: int,
    tz: tzinfo,
    state_limit: int = 15,
    months: int = SEASONALITY_MONTHS
) -> SeasonalityGrid:
    """
    Build the state x month seasonality grid.

    Args:
        records: Scoped records; undated ones are ignored.
        state_totals: Ranked state totals (top `state_limit` become rows).
        now_ms: Reference instant.
        tz: Calendar timezone.
        state_limit: Number of state rows.
        months: Number of trailing months.

    Returns:
        SeasonalityGrid with len(states) * months cells.
    """
    states = [row.state for row in state_totals[:state_limit]]
    state_set = set(states)

    current_month = from_epoch_ms(now_ms, tz).date().replace(day=1)
    buckets = [shift_month(current_month, offset) for offset in range(-(months - 1), 1)]
    month_index = {month_key(bucket): index for index, bucket in enumerate(buckets)}

    counts: Counter = Counter()
    for record in records:
        if not record.is_dated or record.state not in state_set:
            continue
        index = month_index.get(month_key(from_epoch_ms(record.placementTimestamp, tz).date()))
        if index is not None:
            counts[(record.state, index)] += 1

    grid_max = max(counts.values(), default=0)

    cells = []
    for state_index, state in enumerate(states):
        for index, bucket in enumerate(buckets):
            placements = counts.get((state, index), 0)
            cells.append(SeasonalityCell(
                state=state,
                stateIndex=state_index,
                monthLabel=month_label(bucket),
                monthIndex=index,
                placements=placements,
                intensity=0.0 if grid_max == 0 else round(placements / grid_max, 3),
            ))

    return SeasonalityGrid(
        cells=cells,
        states=states,
        months=[month_label(bucket) for bucket in buckets],
    )
