"""
Calendar helpers shared by the analytics services.

All bucketing is pinned to an explicit timezone supplied by the policy;
nothing here reads the process-local clock or timezone.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

DAY_MS = 24 * 60 * 60 * 1000

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def to_epoch_ms(value: datetime) -> int:
    """Exact epoch milliseconds of an aware datetime."""
    return (value - EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(ms: int, tz: tzinfo) -> datetime:
    return (EPOCH + timedelta(milliseconds=ms)).astimezone(tz)


def ensure_aware(value: datetime, tz: tzinfo) -> datetime:
    """Attach `tz` to naive datetimes; convert aware ones into `tz`."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def local_midnight_ms(day: date, tz: tzinfo) -> int:
    return to_epoch_ms(datetime.combine(day, time(), tzinfo=tz))


def start_of_week(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def shift_month(day: date, months: int) -> date:
    """First day of the month `months` away from the month of `day`."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def month_label(day: date) -> str:
    """'Oct '26' style label."""
    return f"{MONTH_LABELS[day.month - 1]} '{day.year % 100:02d}"


def format_short_date(day: date) -> str:
    """'Oct 5' style label."""
    return f"{MONTH_LABELS[day.month - 1]} {day.day}"


def format_long_date(value: Optional[datetime], fallback: str = "No dated records") -> str:
    """'Oct 5, 2026' style label, or `fallback` when there is no date."""
    if value is None:
        return fallback
    return f"{MONTH_LABELS[value.month - 1]} {value.day}, {value.year}"
