"""
Test suite for the record normalization service.

The tests verify:
1. Date parsing accepts US month-first and ISO-like text, rejects the rest
2. Parsed dates are pinned to the calendar timezone
3. Field coercion (appId fallback, city trimming, state canonicalization)
4. Payload-level behavior: non-mapping items dropped, newest-first ordering
5. Malformed input never raises
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from backend.services.calendar_utils import to_epoch_ms
from backend.services.normalization import (
    normalize_placement_metrics,
    normalize_placement_record,
    parse_placement_date,
)

UTC = ZoneInfo("UTC")


# =============================================================================
# TEST CLASS: DATE PARSING
# =============================================================================


class TestParsePlacementDate:
    """Tests for parse_placement_date."""

    def test_us_month_first_date(self):
        parsed = parse_placement_date("3/15/2026", UTC)
        assert parsed == datetime(2026, 3, 15, tzinfo=UTC)

    def test_us_date_with_zero_padding(self):
        assert parse_placement_date("03/05/2026", UTC) == datetime(2026, 3, 5, tzinfo=UTC)

    def test_us_date_is_month_first(self):
        parsed = parse_placement_date("1/2/2026", UTC)
        assert (parsed.month, parsed.day) == (1, 2)

    @pytest.mark.parametrize("text", ["2/30/2026", "13/1/2026", "0/10/2026"])
    def test_invalid_us_calendar_dates_rejected(self, text):
        assert parse_placement_date(text, UTC) is None

    def test_iso_date(self):
        assert parse_placement_date("2026-10-13", UTC) == datetime(2026, 10, 13, tzinfo=UTC)

    def test_iso_datetime_with_offset_is_converted(self):
        parsed = parse_placement_date("2026-10-13T23:30:00-05:00", UTC)
        assert parsed == datetime(2026, 10, 14, 4, 30, tzinfo=UTC)

    def test_naive_text_is_read_in_calendar_timezone(self):
        chicago = ZoneInfo("America/Chicago")
        parsed = parse_placement_date("2026-10-13", chicago)
        assert parsed.utcoffset() == chicago.utcoffset(datetime(2026, 10, 13))
        assert parsed.date() == date(2026, 10, 13)

    def test_long_form_text(self):
        assert parse_placement_date("October 13, 2026", UTC) == datetime(2026, 10, 13, tzinfo=UTC)

    @pytest.mark.parametrize("text", [
        "not a date",
        "sometime soon",
        "today",
        "Now",
        "12345",
        "1760000000000",
        "Oct 13",
        "",
        "   ",
    ])
    def test_unparseable_text_rejected(self, text):
        assert parse_placement_date(text, UTC) is None

    @pytest.mark.parametrize("value", [None, True, 1760000000000, ["2026-10-13"], {}])
    def test_non_text_values_rejected(self, value):
        assert parse_placement_date(value, UTC) is None

    def test_datetime_and_date_objects_accepted(self):
        aware = datetime(2026, 10, 13, 6, tzinfo=timezone.utc)
        assert parse_placement_date(aware, UTC) == aware
        assert parse_placement_date(date(2026, 10, 13), UTC) == datetime(2026, 10, 13, tzinfo=UTC)

    @pytest.mark.parametrize("value", [
        "1/1/0001",
        "12/31/9999",
        "0001-01-01",
        date(1, 1, 1),
        datetime(1, 1, 1),
        datetime(9999, 12, 31, tzinfo=timezone.utc),
    ])
    @pytest.mark.parametrize("zone", ["UTC", "Asia/Tokyo", "America/Los_Angeles"])
    def test_placeholder_years_rejected(self, value, zone):
        assert parse_placement_date(value, ZoneInfo(zone)) is None

    def test_supported_range_edges(self):
        assert parse_placement_date("1/1/1700", UTC) == datetime(1700, 1, 1, tzinfo=UTC)
        assert parse_placement_date("12/31/2261", UTC) == datetime(2261, 12, 31, tzinfo=UTC)
        assert parse_placement_date("1/1/1600", UTC) is None
        assert parse_placement_date("1/1/2300", UTC) is None


# =============================================================================
# TEST CLASS: RECORD NORMALIZATION
# =============================================================================


class TestNormalizePlacementRecord:
    """Tests for normalize_placement_record."""

    def test_clean_item(self, raw_item):
        record = normalize_placement_record(raw_item, 0, UTC)
        assert record.appId == 1
        assert record.city == "Austin"
        assert record.state == "Texas"
        assert record.placementDate == datetime(2026, 10, 13, tzinfo=UTC)
        assert record.placementTimestamp == to_epoch_ms(datetime(2026, 10, 13, tzinfo=UTC))
        assert record.placementDateRaw == "2026-10-13"

    def test_camel_case_app_id_and_numeric_string(self):
        record = normalize_placement_record({"appId": "42"}, 7, UTC)
        assert record.appId == 42

    @pytest.mark.parametrize("value", [None, "abc", 1.5, True, float("nan")])
    def test_app_id_falls_back_to_index(self, value):
        record = normalize_placement_record({"app_id": value}, 7, UTC)
        assert record.appId == 7

    def test_missing_fields_default(self):
        record = normalize_placement_record({}, 3, UTC)
        assert record.appId == 3
        assert record.city == ""
        assert record.state == "Unknown"
        assert record.placementDate is None
        assert record.placementTimestamp == 0
        assert record.placementDateRaw == ""

    def test_unparseable_date_keeps_raw_text(self):
        record = normalize_placement_record({"placementDate": "  soon-ish  "}, 0, UTC)
        assert record.placementDate is None
        assert record.placementTimestamp == 0
        assert record.placementDateRaw == "soon-ish"
        assert not record.is_dated

    def test_snake_case_date_key(self):
        record = normalize_placement_record({"placement_date": "2026-01-05"}, 0, UTC)
        assert record.placementDate == datetime(2026, 1, 5, tzinfo=UTC)

    def test_city_is_trimmed_and_numbers_stringified(self):
        assert normalize_placement_record({"city": "  El Paso "}, 0, UTC).city == "El Paso"
        assert normalize_placement_record({"city": 12}, 0, UTC).city == "12"
        assert normalize_placement_record({"city": ["x"]}, 0, UTC).city == ""

    @pytest.mark.parametrize("item", ["text", 5, None, ["a", "b"]])
    def test_non_mapping_items_return_none(self, item):
        assert normalize_placement_record(item, 0, UTC) is None


# =============================================================================
# TEST CLASS: PAYLOAD NORMALIZATION
# =============================================================================


class TestNormalizePlacementMetrics:
    """Tests for normalize_placement_metrics."""

    def test_drops_non_mapping_items(self, raw_feed):
        records = normalize_placement_metrics(raw_feed, UTC)
        assert len(records) == 5
        assert {r.appId for r in records} == {10, 11, 12, 13, 14}

    def test_states_are_canonical(self, raw_feed):
        by_id = {r.appId: r for r in normalize_placement_metrics(raw_feed, UTC)}
        assert by_id[10].state == "Texas"
        assert by_id[11].state == "California"
        assert by_id[13].state == "Unknown"

    def test_newest_first_then_app_id_descending(self, raw_feed):
        records = normalize_placement_metrics(raw_feed, UTC)
        # 10 and 11 share a date; undated 14 sorts last
        assert [r.appId for r in records] == [11, 10, 12, 13, 14]

    @pytest.mark.parametrize("payload", [None, {"records": []}, "[]", 42])
    def test_non_list_payload_yields_empty(self, payload):
        assert normalize_placement_metrics(payload, UTC) == []

    def test_empty_list(self):
        assert normalize_placement_metrics([], UTC) == []

    def test_result_is_independent_of_feed_order(self, raw_feed):
        forward = normalize_placement_metrics(raw_feed, UTC)
        backward = normalize_placement_metrics(list(reversed(raw_feed)), UTC)
        assert [r.appId for r in forward] == [r.appId for r in backward]
