"""
Fixed state-to-region taxonomy (U.S. Census regions).

Every canonical state maps to exactly one of Northeast, Midwest, South or
West. The Unknown state, and any token outside the enumeration, maps to the
Unknown region.
"""

from typing import Dict, List

from backend.models.enums import RegionName
from backend.services.states import is_unknown_state

REGION_ORDER: List[RegionName] = [
    RegionName.NORTHEAST,
    RegionName.MIDWEST,
    RegionName.SOUTH,
    RegionName.WEST,
    RegionName.UNKNOWN,
]

STATE_TO_REGION: Dict[str, RegionName] = {
    # Northeast
    "Connecticut": RegionName.NORTHEAST,
    "Maine": RegionName.NORTHEAST,
    "Massachusetts": RegionName.NORTHEAST,
    "New Hampshire": RegionName.NORTHEAST,
    "Rhode Island": RegionName.NORTHEAST,
    "Vermont": RegionName.NORTHEAST,
    "New Jersey": RegionName.NORTHEAST,
    "New York": RegionName.NORTHEAST,
    "Pennsylvania": RegionName.NORTHEAST,
    # Midwest
    "Illinois": RegionName.MIDWEST,
    "Indiana": RegionName.MIDWEST,
    "Michigan": RegionName.MIDWEST,
    "Ohio": RegionName.MIDWEST,
    "Wisconsin": RegionName.MIDWEST,
    "Iowa": RegionName.MIDWEST,
    "Kansas": RegionName.MIDWEST,
    "Minnesota": RegionName.MIDWEST,
    "Missouri": RegionName.MIDWEST,
    "Nebraska": RegionName.MIDWEST,
    "North Dakota": RegionName.MIDWEST,
    "South Dakota": RegionName.MIDWEST,
    # South
    "Delaware": RegionName.SOUTH,
    "Florida": RegionName.SOUTH,
    "Georgia": RegionName.SOUTH,
    "Maryland": RegionName.SOUTH,
    "North Carolina": RegionName.SOUTH,
    "South Carolina": RegionName.SOUTH,
    "Virginia": RegionName.SOUTH,
    "District of Columbia": RegionName.SOUTH,
    "West Virginia": RegionName.SOUTH,
    "Alabama": RegionName.SOUTH,
    "Kentucky": RegionName.SOUTH,
    "Mississippi": RegionName.SOUTH,
    "Tennessee": RegionName.SOUTH,
    "Arkansas": RegionName.SOUTH,
    "Louisiana": RegionName.SOUTH,
    "Oklahoma": RegionName.SOUTH,
    "Texas": RegionName.SOUTH,
    # West
    "Arizona": RegionName.WEST,
    "Colorado": RegionName.WEST,
    "Idaho": RegionName.WEST,
    "Montana": RegionName.WEST,
    "Nevada": RegionName.WEST,
    "New Mexico": RegionName.WEST,
    "Utah": RegionName.WEST,
    "Wyoming": RegionName.WEST,
    "Alaska": RegionName.WEST,
    "California": RegionName.WEST,
    "Hawaii": RegionName.WEST,
    "Oregon": RegionName.WEST,
    "Washington": RegionName.WEST,
}


def region_for_state(state: str) -> RegionName:
    """
    Look up the region of a canonical state name.

    Example:
        >>> region_for_state("Texas")
        <RegionName.SOUTH: 'South'>
        >>> region_for_state("Unknown")
        <RegionName.UNKNOWN: 'Unknown'>
    """
    if not state or is_unknown_state(state):
        return RegionName.UNKNOWN
    return STATE_TO_REGION.get(state, RegionName.UNKNOWN)
