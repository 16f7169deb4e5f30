"""
Enumeration definitions for the Placement Analytics backend.

This module provides type-safe enumeration values for the scope parameters
accepted by the analytics engine and for the categorical labels it emits
(risk bands, regions, data health).

All enums inherit from both `str` and `Enum` to ensure JSON serialization compatibility
with Pydantic models, enabling automatic serialization/deserialization in API responses.

Source references:
- Dashboard scope controls: DateRange, SeriesGranularity
- Recency panel: RecencyRiskBand
- Coverage panel: RegionName (U.S. Census regions)
- Manager rollup: StalenessPolicy, DashboardVariant
"""

from enum import Enum


class DateRange(str, Enum):
    """
    Date window applied before any aggregation.

    Values: '30d' | '90d' | '12m' | 'all'

    - 30d: Trailing 30 days from the reference instant
    - 90d: Trailing 90 days from the reference instant
    - 12m: Trailing 365 days from the reference instant
    - all: No date restriction; undated records are kept
    """
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    LAST_12_MONTHS = "12m"
    ALL = "all"


class SeriesGranularity(str, Enum):
    """
    Bucket width for the placement trend series.

    - daily: One bucket per calendar day
    - weekly: One bucket per Monday-anchored calendar week
    """
    DAILY = "daily"
    WEEKLY = "weekly"


class RecencyRiskBand(str, Enum):
    """
    Risk tier assigned from days elapsed since a state's last placement.

    Default ladder: Healthy <= 14 days, Watch 15-30 days, At Risk 31+ days.
    States without any dated record always land in At Risk.
    """
    HEALTHY = "Healthy"
    WATCH = "Watch"
    AT_RISK = "At Risk"


class RegionName(str, Enum):
    """
    U.S. Census-style region groupings used by the coverage rollup.

    Every canonical state maps to exactly one of the four named regions;
    the Unknown state maps to the Unknown region.
    """
    NORTHEAST = "Northeast"
    MIDWEST = "Midwest"
    SOUTH = "South"
    WEST = "West"
    UNKNOWN = "Unknown"


class StalenessPolicy(str, Enum):
    """
    Which staleness rule feeds the `staleStateCount` KPI.

    - risk_ladder: states in the At Risk band (general dashboard)
    - stale_threshold: states at or beyond the stale-days threshold (manager rollup)
    """
    RISK_LADDER = "risk_ladder"
    STALE_THRESHOLD = "stale_threshold"


class DashboardVariant(str, Enum):
    """
    Named policy presets matching the two reporting dashboards.

    - dashboard: general placement dashboard (Unknown states kept, risk ladder KPI)
    - manager: manager rollup (Unknown states hidden, 90-day staleness KPI)
    """
    DASHBOARD = "dashboard"
    MANAGER = "manager"


class DataHealth(str, Enum):
    """
    Headline data-quality flag.

    - OK: every record had a parseable date and a recognized state
    - Issue: at least one record was degraded during normalization
    """
    OK = "OK"
    ISSUE = "Issue"


class Weekday(str, Enum):
    """Weekday labels in Monday-first order, as used by the weekday pulse."""
    MONDAY = "Mon"
    TUESDAY = "Tue"
    WEDNESDAY = "Wed"
    THURSDAY = "Thu"
    FRIDAY = "Fri"
    SATURDAY = "Sat"
    SUNDAY = "Sun"
