"""
Pytest Configuration and Shared Fixtures for Placement Analytics Backend Tests.

This module provides fixtures and configuration for all backend tests, supporting:
- A fixed reference instant so every calendar-dependent view is reproducible
- A placement record factory producing normalized PlacementRecord objects
- Default and manager policy fixtures
- Representative raw feed payloads (clean and malformed items)

Test modules:
- test_states / test_normalization: canonicalization and record coercion
- test_scoping / test_aggregation: range filtering, totals and shares
- test_time_series / test_growth / test_seasonality: calendar views
- test_recency / test_regional_rollup / test_kpis: staleness, coverage, headline metrics
- test_placement_analytics: end-to-end pipeline properties
- test_api: HTTP surface via FastAPI TestClient

Dependencies:
- pytest
- httpx (required by fastapi.testclient)
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest

from backend.core.config import Settings, build_policy
from backend.models.enums import DashboardVariant
from backend.models.schemas import AnalyticsPolicy, PlacementRecord
from backend.services.calendar_utils import to_epoch_ms


# ============================================================
# PYTEST CONFIGURATION
# ============================================================


def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - slow: Marks tests as slow (deselect with -m "not slow")
    - api: Marks tests exercising the HTTP layer

    Usage:
        # Run only fast tests:
        pytest -m "not slow"

    Args:
        config: Pytest configuration object
    """
    config.addinivalue_line(
        'markers',
        'slow: marks tests as slow (deselect with -m "not slow")'
    )
    config.addinivalue_line(
        'markers',
        'api: marks tests exercising the FastAPI endpoints'
    )


# ============================================================
# REFERENCE INSTANT
# ============================================================

# Sunday, 2026-10-18 12:00 UTC
FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant used by every calendar-dependent test."""
    return FIXED_NOW


@pytest.fixture
def now_ms(now: datetime) -> int:
    return to_epoch_ms(now)


# ============================================================
# RECORD FACTORY
# ============================================================


def make_record(
    app_id: int,
    state: str = "Texas",
    city: str = "Austin",
    days_ago: Optional[float] = None,
    raw: Optional[str] = None,
    now: datetime = FIXED_NOW,
) -> PlacementRecord:
    """
    Build a normalized PlacementRecord relative to the reference instant.

    Args:
        app_id: Record identifier
        state: Canonical state name
        city: City text
        days_ago: Age of the placement in days; None produces an undated record
        raw: Raw date text (defaults to the ISO date, or "" when undated)
        now: Reference instant

    Returns:
        PlacementRecord
    """
    if days_ago is None:
        return PlacementRecord(
            appId=app_id,
            city=city,
            state=state,
            placementDateRaw=raw or "",
        )

    placed = now - timedelta(days=days_ago)
    return PlacementRecord(
        appId=app_id,
        city=city,
        state=state,
        placementDate=placed,
        placementTimestamp=to_epoch_ms(placed),
        placementDateRaw=raw if raw is not None else placed.date().isoformat(),
    )


@pytest.fixture
def record_factory() -> Callable[..., PlacementRecord]:
    """Expose make_record to tests as a fixture."""
    return make_record


@pytest.fixture
def sample_records() -> List[PlacementRecord]:
    """
    Small mixed dataset, newest first.

    - Texas: 3 placements (2 within 30 days, 1 at 45 days)
    - California: 2 placements (1 within 30 days, 1 at 200 days)
    - New York: 1 placement at 120 days
    - Unknown: 1 undated placement
    """
    records = [
        make_record(1, "Texas", "Austin", days_ago=2),
        make_record(2, "Texas", "Dallas", days_ago=10),
        make_record(3, "California", "Fresno", days_ago=20),
        make_record(4, "Texas", "Austin", days_ago=45),
        make_record(5, "New York", "Buffalo", days_ago=120),
        make_record(6, "California", "San Diego", days_ago=200),
        make_record(7, "Unknown", "", days_ago=None, raw="sometime soon"),
    ]
    return sorted(records, key=lambda r: (-r.placementTimestamp, -r.appId))


# ============================================================
# POLICY FIXTURES
# ============================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with defaults only (no environment or .env influence)."""
    return Settings(_env_file=None)


@pytest.fixture
def default_policy() -> AnalyticsPolicy:
    return AnalyticsPolicy()


@pytest.fixture
def manager_policy(test_settings: Settings) -> AnalyticsPolicy:
    return build_policy(test_settings, DashboardVariant.MANAGER)


# ============================================================
# RAW FEED PAYLOADS
# ============================================================


@pytest.fixture
def raw_feed() -> List[Any]:
    """
    Raw decoded feed exercising every normalization path.

    Includes abbreviation/case variants, US and ISO dates, a non-mapping
    item, an unparseable date and a blocklisted state.
    """
    return [
        {"app_id": 10, "city": " Austin ", "state": "tx", "placementDate": "2026-10-13"},
        {"appId": "11", "city": "Fresno", "state": "CA", "placementDate": "10/13/2026"},
        {"app_id": 12, "city": "Houston", "state": "Texas", "placement_date": "2026-10-01T15:30:00Z"},
        "not-a-record",
        {"app_id": 13, "city": "Reno", "state": "N/A", "placementDate": "2026-09-01"},
        {"app_id": 14, "city": "Boise", "state": "Idaho", "placementDate": "not a date"},
        None,
    ]


@pytest.fixture
def raw_item() -> Dict[str, Any]:
    return {"app_id": 1, "city": "Austin", "state": "TX", "placementDate": "2026-10-13"}
