"""
Regional coverage rollup.

Walks the full 51-entry state enumeration (not just states present in the
data), assigns each state its scoped placement count (possibly 0), and
buckets it into its fixed region.

- Coverage rows exclude the Unknown region and regions with zero total.
- Within a region, states sort by descending count, then name, capped with
  a truncation flag.
- Untapped states are enumeration members with zero scoped placements,
  listed in enumeration order.
"""

from typing import Dict, List, Mapping

from backend.models.enums import RegionName
from backend.models.schemas import CoverageStateRow, RegionCoverageRow, UntappedStateRow
from backend.services.regions import REGION_ORDER, region_for_state
from backend.services.states import ALL_STATE_NAMES


def build_coverage(
    state_counts: Mapping[str, int],
    state_limit: int = 12
) -> List[RegionCoverageRow]:
    """
    Coverage rollup by region.

    Args:
        state_counts: Scoped placement count per canonical state.
        state_limit: Maximum states listed per region.

    Returns:
        RegionCoverageRow list in fixed region order.

    Example:
        >>> rows = build_coverage({"Texas": 3})
        >>> [(row.region.value, row.totalPlacements) for row in rows]
        [('South', 3)]
    """
    buckets: Dict[RegionName, List[CoverageStateRow]] = {region: [] for region in REGION_ORDER}
    for state in ALL_STATE_NAMES:
        buckets[region_for_state(state)].append(
            CoverageStateRow(state=state, placements=state_counts.get(state, 0))
        )

    rows = []
    for region in REGION_ORDER:
        if region == RegionName.UNKNOWN:
            continue
        states = sorted(buckets[region], key=lambda row: (-row.placements, row.state))
        total = sum(row.placements for row in states)
        if total == 0:
            continue
        rows.append(RegionCoverageRow(
            region=region,
            totalPlacements=total,
            states=states[:state_limit],
            truncated=len(states) > state_limit,
        ))
    return rows


def build_untapped_states(state_counts: Mapping[str, int]) -> List[UntappedStateRow]:
    """
    Enumeration states with zero scoped placements.

    Example:
        >>> "Wyoming" in [row.state for row in build_untapped_states({"Texas": 1})]
        True
    """
    return [
        UntappedStateRow(state=state, region=region_for_state(state), placements=0)
        for state in ALL_STATE_NAMES
        if state_counts.get(state, 0) == 0
    ]
