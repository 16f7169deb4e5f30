"""
Record normalization service for the placement metrics feed.

This module coerces arbitrary decoded feed items into well-typed
PlacementRecord objects. It never raises for malformed input: items that are
not mappings are dropped, and malformed fields degrade to defaults.

Field handling:
- app_id / appId: numeric identifier; falls back to the item's index
- city: trimmed text, defaults to ""
- state: canonicalized via backend.services.states.normalize_state
- placementDate / placement_date: parsed into an aware datetime in the
  calendar timezone; on failure placementDate is None, placementTimestamp
  is 0 and placementDateRaw keeps the trimmed source text

Date parsing:
- US month-first "M/D/YYYY" is matched explicitly and validated
- Everything else goes through pandas.to_datetime with errors='coerce'
- Text without a four-digit year, bare numbers, and relative words such as
  "today" are rejected so that parsing never depends on the wall clock

Output is ordered by descending placement timestamp, then descending appId.
"""

import logging
import math
import re
import warnings
from datetime import date, datetime, tzinfo
from typing import Any, List, Mapping, Optional, Sequence

import pandas as pd

from backend.models.schemas import PlacementRecord
from backend.services.calendar_utils import ensure_aware, to_epoch_ms
from backend.services.states import normalize_state

# Configure module logger
logger = logging.getLogger(__name__)

US_DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
YEAR_PATTERN = re.compile(r"\d{4}")
NUMERIC_PATTERN = re.compile(r"^[+-]?\d+(\.\d+)?$")
RELATIVE_DATE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})

# Same window pandas can represent, narrowed by a day so that any timezone
# shift stays representable. Placeholders such as "1/1/0001" fall outside.
MIN_PLACEMENT_DATE = (pd.Timestamp.min + pd.Timedelta(days=1)).date()
MAX_PLACEMENT_DATE = (pd.Timestamp.max - pd.Timedelta(days=1)).date()

APP_ID_KEYS = ("app_id", "appId")
DATE_KEYS = ("placementDate", "placement_date")


# =============================================================================
# Field Coercion Helpers
# =============================================================================


def _safe_string(value: Any) -> Optional[str]:
    """
    Trimmed text for strings and plain numbers, None otherwise.

    Blank strings and non-finite numbers are treated as missing.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if not isinstance(value, (str, int, float)):
        return None
    text = str(value).strip()
    return text or None


def _safe_int(value: Any) -> Optional[int]:
    """
    Integer for integral numbers and numeric strings, None otherwise.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return int(parsed) if math.isfinite(parsed) and parsed.is_integer() else None
    return None


def _first_present(item: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in item:
            return item[key]
    return None


# =============================================================================
# Date Parsing
# =============================================================================


def _in_supported_range(value: date) -> bool:
    """True when the calendar date lies within MIN_PLACEMENT_DATE..MAX_PLACEMENT_DATE."""
    day = value.date() if isinstance(value, datetime) else value
    return MIN_PLACEMENT_DATE <= day <= MAX_PLACEMENT_DATE


def parse_placement_date(value: Any, tz: tzinfo) -> Optional[datetime]:
    """
    Parse a placement date into an aware datetime in `tz`.

    Args:
        value: Raw date value (text, datetime or date).
        tz: Calendar timezone; naive values are interpreted in it.

    Returns:
        Aware datetime, or None if the value cannot be parsed.

    Example:
        >>> parse_placement_date("3/15/2026", ZoneInfo("UTC"))
        datetime.datetime(2026, 3, 15, 0, 0, tzinfo=zoneinfo.ZoneInfo(key='UTC'))
        >>> parse_placement_date("2/30/2026", ZoneInfo("UTC")) is None
        True
    """
    if isinstance(value, datetime):
        return ensure_aware(value, tz) if _in_supported_range(value) else None
    if isinstance(value, date):
        if not _in_supported_range(value):
            return None
        return datetime(value.year, value.month, value.day, tzinfo=tz)

    text = _safe_string(value)
    if text is None:
        return None

    us_match = US_DATE_PATTERN.match(text)
    if us_match:
        month, day, year = (int(part) for part in us_match.groups())
        try:
            parsed_day = date(year, month, day)
        except ValueError:
            return None
        if not _in_supported_range(parsed_day):
            return None
        return datetime(year, month, day, tzinfo=tz)

    if (
        NUMERIC_PATTERN.match(text)
        or not YEAR_PATTERN.search(text)
        or text.lower() in RELATIVE_DATE_WORDS
    ):
        return None

    with warnings.catch_warnings():
        # Format-inference warnings are expected for heterogeneous feeds
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None

    if parsed is None or pd.isna(parsed):
        return None

    parsed = parsed.to_pydatetime()
    if not _in_supported_range(parsed):
        return None
    return ensure_aware(parsed, tz)


# =============================================================================
# Record Normalization
# =============================================================================


def normalize_placement_record(item: Any, index: int, tz: tzinfo) -> Optional[PlacementRecord]:
    """
    Normalize a single feed item.

    Args:
        item: Decoded feed item.
        index: Position of the item in the feed (fallback identifier).
        tz: Calendar timezone.

    Returns:
        PlacementRecord, or None when the item is not a mapping.
    """
    if not isinstance(item, Mapping):
        return None

    app_id = _safe_int(_first_present(item, APP_ID_KEYS))
    raw_date = _first_present(item, DATE_KEYS)

    placement_date = parse_placement_date(raw_date, tz)
    if isinstance(raw_date, (datetime, date)):
        placement_date_raw = raw_date.isoformat()
    else:
        placement_date_raw = _safe_string(raw_date) or ""

    return PlacementRecord(
        appId=app_id if app_id is not None else index,
        city=_safe_string(item.get("city")) or "",
        state=normalize_state(item.get("state")),
        placementDate=placement_date,
        placementTimestamp=to_epoch_ms(placement_date) if placement_date else 0,
        placementDateRaw=placement_date_raw,
    )


def normalize_placement_metrics(payload: Any, tz: tzinfo) -> List[PlacementRecord]:
    """
    Normalize a decoded placement metrics payload.

    Items that are not mappings are silently dropped. The result is ordered
    by descending timestamp, then descending appId, so that the most recent
    placements come first regardless of feed order.

    Args:
        payload: Decoded JSON payload, expected to be a list of objects.
        tz: Calendar timezone for date interpretation.

    Returns:
        List of PlacementRecord objects.

    Example:
        >>> records = normalize_placement_metrics(
        ...     [{"app_id": 1, "city": "Austin", "state": "tx", "placementDate": "2026-10-01"}, "bad"],
        ...     ZoneInfo("UTC"),
        ... )
        >>> [(r.appId, r.state) for r in records]
        [(1, 'Texas')]
    """
    if not isinstance(payload, (list, tuple)):
        logger.debug(f"Placement payload is {type(payload).__name__}, not a list; nothing to normalize")
        return []

    records = []
    for index, item in enumerate(payload):
        record = normalize_placement_record(item, index, tz)
        if record is not None:
            records.append(record)

    dropped = len(payload) - len(records)
    if dropped:
        logger.debug(f"Dropped {dropped} malformed placement items of {len(payload)}")

    records.sort(key=lambda r: (-r.placementTimestamp, -r.appId))
    return records
