# Overview: Pytest coverage for reporting period resolution.

from datetime import date, datetime, timedelta, timezone

import pytest

from franchise_metrics.errors import InvalidPeriod
from franchise_metrics.services.period_service import DateRange, resolve_period, shift_months
from franchise_metrics.time_utils import ceil_to_date


NOW = datetime(2026, 3, 31, 12, 0, 0)


class TestTokenPeriods:
    """Named tokens end at the captured now and step back a fixed offset."""

    def test_week_is_seven_days(self):
        period = resolve_period("week", now=NOW)
        assert period.current == DateRange(NOW - timedelta(days=7), NOW)
        assert period.previous == DateRange(NOW - timedelta(days=14), NOW - timedelta(days=7))

    def test_month_clamps_to_shorter_month(self):
        period = resolve_period("month", now=NOW)
        assert period.current.start == datetime(2026, 2, 28, 12, 0, 0)
        assert period.current.end == NOW

    def test_quarter_steps_back_three_months(self):
        period = resolve_period("quarter", now=datetime(2026, 5, 31, 8, 30))
        assert period.current.start == datetime(2026, 2, 28, 8, 30)

    def test_year_from_leap_day(self):
        period = resolve_period("year", now=datetime(2024, 2, 29))
        assert period.current.start == datetime(2023, 2, 28)

    def test_token_is_case_insensitive(self):
        assert resolve_period("Month", now=NOW).token == "month"

    @pytest.mark.parametrize("token", ["week", "month", "quarter", "year"])
    def test_previous_is_adjacent_and_same_length(self, token):
        period = resolve_period(token, now=NOW)
        assert period.previous.end == period.current.start
        assert period.previous.duration == period.current.duration

    def test_now_is_carried_unchanged(self):
        assert resolve_period("week", now=NOW).now == NOW

    def test_unknown_token_rejected(self):
        with pytest.raises(InvalidPeriod) as excinfo:
            resolve_period("decade", now=NOW)
        assert excinfo.value.details == {"period": "decade"}

    def test_missing_token_and_bounds_rejected(self):
        with pytest.raises(InvalidPeriod):
            resolve_period(None, now=NOW)


class TestExplicitBounds:
    def test_iso_strings(self):
        period = resolve_period(now=NOW, start="2026-01-01", end="2026-01-31T00:00:00Z")
        assert period.token is None
        assert period.current == DateRange(datetime(2026, 1, 1), datetime(2026, 1, 31))
        assert period.previous == DateRange(datetime(2025, 12, 2), datetime(2026, 1, 1))

    def test_aware_datetimes_normalized_to_utc(self):
        paris = timezone(timedelta(hours=1))
        period = resolve_period(
            now=NOW,
            start=datetime(2026, 1, 1, 1, 0, tzinfo=paris),
            end=datetime(2026, 1, 2, 1, 0, tzinfo=paris),
        )
        assert period.current.start == datetime(2026, 1, 1, 0, 0)
        assert period.current.start.tzinfo is None

    def test_start_must_precede_end(self):
        with pytest.raises(InvalidPeriod):
            resolve_period(now=NOW, start="2026-02-01", end="2026-02-01")

    def test_single_bound_rejected(self):
        with pytest.raises(InvalidPeriod):
            resolve_period(now=NOW, start="2026-02-01")

    def test_token_and_bounds_rejected(self):
        with pytest.raises(InvalidPeriod):
            resolve_period("month", now=NOW, start="2026-01-01", end="2026-02-01")

    def test_previous_range_before_year_one_rejected(self):
        with pytest.raises(InvalidPeriod, match="comparable previous"):
            resolve_period(now=NOW, start="0001-06-01", end="2026-01-01")

    def test_unparseable_bound_rejected(self):
        with pytest.raises(InvalidPeriod):
            resolve_period(now=NOW, start="last tuesday", end="2026-02-01")


class TestDateBounds:
    def test_midnight_bound_keeps_its_day(self):
        assert ceil_to_date(datetime(2026, 3, 1)) == date(2026, 3, 1)

    def test_intraday_bound_moves_to_next_day(self):
        assert ceil_to_date(datetime(2026, 3, 1, 0, 0, 1)) == date(2026, 3, 2)

    def test_month_period_covers_whole_days(self):
        period = resolve_period("month", now=NOW)
        assert period.current.date_bounds() == (date(2026, 3, 1), date(2026, 4, 1))
        assert period.previous.date_bounds() == (date(2026, 1, 29), date(2026, 3, 1))


def test_shift_months_crosses_year_boundary():
    assert shift_months(datetime(2026, 1, 15), -1) == datetime(2025, 12, 15)
    assert shift_months(datetime(2025, 11, 30), 3) == datetime(2026, 2, 28)
