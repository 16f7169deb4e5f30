"""
Test suite for the gap-filled time-series builders.

Reference instant: Sunday 2026-10-18 12:00 UTC (week starts Monday 2026-10-12).

The tests verify:
1. Daily series cover every calendar day of the span, zero-filled
2. Weekly series are Monday-anchored with epoch-ms period keys
3. Series totals equal the dated record count within the span
4. Calendar bucketing honors the policy timezone
5. Top-state momentum, monthly trend and weekday pulse specializations
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from backend.models.enums import SeriesGranularity, Weekday
from backend.models.schemas import PlacementRecord
from backend.services.aggregation import build_state_totals, tally_placements
from backend.services.calendar_utils import DAY_MS, local_midnight_ms, to_epoch_ms
from backend.services.time_series import (
    DEFAULT_SPAN_DAYS,
    build_daily_series,
    build_monthly_trend,
    build_state_weekly_series,
    build_trend_series,
    build_weekday_pulse,
    build_weekly_series,
    resolve_series_start,
)

UTC = ZoneInfo("UTC")


class TestResolveSeriesStart:
    """Tests for resolve_series_start."""

    def test_prefers_range_start(self):
        assert resolve_series_start(100, 50, 1000) == 100

    def test_falls_back_to_earliest_record(self):
        assert resolve_series_start(None, 50, 1000) == 50

    def test_default_span(self):
        now_ms = 100 * DAY_MS
        assert resolve_series_start(None, None, now_ms) == now_ms - DEFAULT_SPAN_DAYS * DAY_MS


class TestDailySeries:
    """Tests for build_daily_series."""

    def test_30_day_span_has_31_days(self, sample_records, now_ms):
        series = build_daily_series(sample_records, now_ms - 30 * DAY_MS, now_ms, UTC)
        assert len(series) == 31
        assert series[0].periodKey == "2026-09-18"
        assert series[-1].periodKey == "2026-10-18"
        assert series[-1].periodLabel == "Oct 18"

    def test_gap_filled_and_conserving(self, sample_records, now_ms):
        series = build_daily_series(sample_records, now_ms - 30 * DAY_MS, now_ms, UTC)
        assert sum(point.placements for point in series) == 3
        by_key = {point.periodKey: point.placements for point in series}
        assert by_key["2026-10-16"] == 1
        assert by_key["2026-10-08"] == 1
        assert by_key["2026-09-28"] == 1
        assert by_key["2026-10-01"] == 0

    def test_consecutive_days(self, sample_records, now_ms):
        series = build_daily_series(sample_records, now_ms - 10 * DAY_MS, now_ms, UTC)
        days = [date.fromisoformat(point.periodKey) for point in series]
        assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))

    def test_state_allow_list(self, sample_records, now_ms):
        series = build_daily_series(
            sample_records, now_ms - 30 * DAY_MS, now_ms, UTC, state_allow_list={"California"}
        )
        assert sum(point.placements for point in series) == 1

    def test_empty_records_still_gap_filled(self, now_ms):
        series = build_daily_series([], now_ms - 5 * DAY_MS, now_ms, UTC)
        assert len(series) == 6
        assert all(point.placements == 0 for point in series)

    def test_timezone_moves_bucket(self):
        # 2026-10-13 03:00 UTC is still 2026-10-12 in Chicago
        instant = datetime(2026, 10, 13, 3, tzinfo=UTC)
        record = PlacementRecord(
            appId=1,
            state="Texas",
            placementDate=instant,
            placementTimestamp=to_epoch_ms(instant),
        )
        end_ms = to_epoch_ms(datetime(2026, 10, 14, tzinfo=UTC))
        start_ms = end_ms - 3 * DAY_MS

        utc_keys = {p.periodKey: p.placements for p in build_daily_series([record], start_ms, end_ms, UTC)}
        chicago = ZoneInfo("America/Chicago")
        local_keys = {p.periodKey: p.placements for p in build_daily_series([record], start_ms, end_ms, chicago)}

        assert utc_keys["2026-10-13"] == 1
        assert local_keys["2026-10-12"] == 1
        assert local_keys.get("2026-10-13", 0) == 0


class TestWeeklySeries:
    """Tests for build_weekly_series and build_trend_series."""

    def test_monday_anchored_keys(self, sample_records, now_ms):
        series = build_weekly_series(sample_records, now_ms - 30 * DAY_MS, now_ms, UTC)
        mondays = [date(2026, 9, 14), date(2026, 9, 21), date(2026, 9, 28), date(2026, 10, 5), date(2026, 10, 12)]
        assert [point.periodKey for point in series] == [str(local_midnight_ms(d, UTC)) for d in mondays]
        assert series[0].periodLabel == "Sep 14"

    def test_weekly_counts(self, sample_records, now_ms):
        series = build_weekly_series(sample_records, now_ms - 30 * DAY_MS, now_ms, UTC)
        assert [point.placements for point in series] == [0, 0, 1, 1, 1]

    def test_keys_strictly_increasing_by_one_week(self, sample_records, now_ms):
        series = build_weekly_series(sample_records, now_ms - 90 * DAY_MS, now_ms, UTC)
        keys = [int(point.periodKey) for point in series]
        assert all(b - a == 7 * DAY_MS for a, b in zip(keys, keys[1:]))

    def test_dispatch(self, sample_records, now_ms):
        start_ms = now_ms - 30 * DAY_MS
        daily = build_trend_series(sample_records, start_ms, now_ms, SeriesGranularity.DAILY, UTC)
        weekly = build_trend_series(sample_records, start_ms, now_ms, SeriesGranularity.WEEKLY, UTC)
        assert len(daily) == 31
        assert len(weekly) == 5


class TestStateWeeklySeries:
    """Tests for build_state_weekly_series."""

    def test_sixteen_weeks_for_top_states(self, sample_records, now_ms):
        totals = build_state_totals(tally_placements(sample_records))
        rows, states = build_state_weekly_series(sample_records, totals, now_ms, UTC, state_limit=2)

        assert states == ["Texas", "California"]
        assert len(rows) == 16
        assert rows[-1].weekKey == "2026-10-12"
        assert rows[0].weekKey == "2026-06-29"
        assert set(rows[0].counts) == {"Texas", "California"}

    def test_counts_per_state(self, sample_records, now_ms):
        totals = build_state_totals(tally_placements(sample_records))
        rows, _ = build_state_weekly_series(sample_records, totals, now_ms, UTC, state_limit=2)
        by_week = {row.weekKey: row.counts for row in rows}
        assert by_week["2026-10-12"] == {"Texas": 1, "California": 0}
        assert by_week["2026-09-28"] == {"Texas": 0, "California": 1}
        assert by_week["2026-08-31"]["Texas"] == 1

    def test_no_states(self, now_ms):
        rows, states = build_state_weekly_series([], [], now_ms, UTC)
        assert states == []
        assert len(rows) == 16
        assert all(row.counts == {} for row in rows)


class TestMonthlyTrend:
    """Tests for build_monthly_trend."""

    def test_twelve_months_ending_current(self, sample_records, now_ms):
        points = build_monthly_trend(sample_records, now_ms, UTC)
        assert len(points) == 12
        assert points[0].monthKey == "2025-11"
        assert points[-1].monthKey == "2026-10"
        assert points[-1].monthLabel == "Oct '26"

    def test_counts_and_moving_average(self, sample_records, now_ms):
        points = {p.monthKey: p for p in build_monthly_trend(sample_records, now_ms, UTC)}
        assert points["2026-10"].placements == 2
        assert points["2026-09"].placements == 2
        assert points["2026-06"].placements == 1
        assert points["2026-04"].placements == 1
        # (Aug 0 + Sep 2 + Oct 2) / 3
        assert points["2026-10"].movingAverage == pytest.approx(1.3)

    def test_short_window_at_start(self, record_factory, now_ms):
        # Nov '25 is the first bucket, averaged over itself only
        record = record_factory(1, days_ago=340)
        points = build_monthly_trend([record], now_ms, UTC)
        assert points[0].placements == 1
        assert points[0].movingAverage == pytest.approx(1.0)


class TestWeekdayPulse:
    """Tests for build_weekday_pulse."""

    def test_monday_first_with_peak(self, sample_records):
        rows, peak = build_weekday_pulse(sample_records, UTC)
        assert [row.day for row in rows] == list(Weekday)
        counts = {row.day: row.placements for row in rows}
        assert counts[Weekday.THURSDAY] == 2
        assert counts[Weekday.MONDAY] == 1
        assert sum(counts.values()) == 6
        assert peak == Weekday.THURSDAY

    def test_no_dated_records(self, record_factory):
        rows, peak = build_weekday_pulse([record_factory(1, days_ago=None)], UTC)
        assert peak is None
        assert all(row.placements == 0 for row in rows)
