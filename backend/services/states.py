"""
State canonicalization for placement records.

Maps free-form state tokens (postal abbreviations, full names in any case,
punctuation noise) onto the fixed 51-member enumeration of U.S. states plus
the District of Columbia. Anything unrecognized becomes "Unknown".

Algorithm:
1. Non-text values (other than plain numbers) are Unknown.
2. Trim; blank or blocklisted tokens ("n/a", "none", "null", ...) are Unknown.
3. Uppercase and drop periods; a match against the abbreviation table wins.
4. Otherwise strip every non-letter character, case-fold, and compare
   against the case-folded full names.
"""

import re
from typing import Any, Dict, Optional, Tuple

UNKNOWN_STATE = "Unknown"

ABBREVIATION_TO_STATE: Dict[str, str] = {
    "AL": "Alabama",
    "AK": "Alaska",
    "AZ": "Arizona",
    "AR": "Arkansas",
    "CA": "California",
    "CO": "Colorado",
    "CT": "Connecticut",
    "DE": "Delaware",
    "FL": "Florida",
    "GA": "Georgia",
    "HI": "Hawaii",
    "ID": "Idaho",
    "IL": "Illinois",
    "IN": "Indiana",
    "IA": "Iowa",
    "KS": "Kansas",
    "KY": "Kentucky",
    "LA": "Louisiana",
    "ME": "Maine",
    "MD": "Maryland",
    "MA": "Massachusetts",
    "MI": "Michigan",
    "MN": "Minnesota",
    "MS": "Mississippi",
    "MO": "Missouri",
    "MT": "Montana",
    "NE": "Nebraska",
    "NV": "Nevada",
    "NH": "New Hampshire",
    "NJ": "New Jersey",
    "NM": "New Mexico",
    "NY": "New York",
    "NC": "North Carolina",
    "ND": "North Dakota",
    "OH": "Ohio",
    "OK": "Oklahoma",
    "OR": "Oregon",
    "PA": "Pennsylvania",
    "RI": "Rhode Island",
    "SC": "South Carolina",
    "SD": "South Dakota",
    "TN": "Tennessee",
    "TX": "Texas",
    "UT": "Utah",
    "VT": "Vermont",
    "VA": "Virginia",
    "WA": "Washington",
    "WV": "West Virginia",
    "WI": "Wisconsin",
    "WY": "Wyoming",
    "DC": "District of Columbia",
}

STATE_TO_ABBREVIATION: Dict[str, str] = {
    state: abbreviation for abbreviation, state in ABBREVIATION_TO_STATE.items()
}

# 50 states alphabetically, then the federal district
ALL_STATE_NAMES: Tuple[str, ...] = tuple(
    sorted(s for s in STATE_TO_ABBREVIATION if s != "District of Columbia")
) + ("District of Columbia",)

INVALID_STATE_TOKENS = frozenset({
    "",
    "unknown",
    "n/a",
    "na",
    "none",
    "null",
    "undefined",
    "-",
    "--",
})

_NON_LETTERS = re.compile(r"[^a-z]")


def _fold(value: str) -> str:
    return _NON_LETTERS.sub("", value.lower())


_NAME_LOOKUP: Dict[str, str] = {_fold(state): state for state in ALL_STATE_NAMES}


def normalize_state(value: Any) -> str:
    """
    Canonicalize a free-form state token.

    Args:
        value: Raw state value from a feed item (any type).

    Returns:
        Full canonical state name, or "Unknown".

    Example:
        >>> normalize_state(" tx ")
        'Texas'
        >>> normalize_state("new-york")
        'New York'
        >>> normalize_state("N/A")
        'Unknown'
    """
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return UNKNOWN_STATE

    token = str(value).strip()
    if token.lower() in INVALID_STATE_TOKENS:
        return UNKNOWN_STATE

    abbreviation = token.upper().replace(".", "")
    if abbreviation in ABBREVIATION_TO_STATE:
        return ABBREVIATION_TO_STATE[abbreviation]

    return _NAME_LOOKUP.get(_fold(token), UNKNOWN_STATE)


def is_unknown_state(state: str) -> bool:
    return state == UNKNOWN_STATE


def state_abbreviation(state: str) -> Optional[str]:
    """Postal abbreviation for a canonical state name, or None."""
    return STATE_TO_ABBREVIATION.get(state)
