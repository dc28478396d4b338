"""Tests for reporting window resolution."""

import pytest
from datetime import datetime, timedelta, timezone

from seller_analytics.services.date_range import (
    DateRange, end_of_month, month_key, months_between, parse_month,
    resolve_date_range, shift_months, start_of_month,
)
from seller_analytics.services.errors import InvalidDateFormat


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


NOW = utc(2024, 8, 31, 15, 30)


class TestParseMonth:
    def test_first_instant(self):
        assert parse_month("2024-03") == utc(2024, 3, 1)

    def test_surrounding_whitespace(self):
        assert parse_month(" 2024-11 ") == utc(2024, 11, 1)

    @pytest.mark.parametrize("value", ["2024-13", "2024-00", "2024-3", "24-03", "2024/03", "March", "", "2024-03-01"])
    def test_rejects_bad_strings(self, value):
        with pytest.raises(InvalidDateFormat):
            parse_month(value)

    def test_rejects_non_string(self):
        with pytest.raises(InvalidDateFormat):
            parse_month(202403)

    def test_error_carries_value(self):
        with pytest.raises(InvalidDateFormat) as exc:
            parse_month("2024-13")
        assert exc.value.value == "2024-13"

    @pytest.mark.parametrize("value", ["0000-06", "0001-01", "0001-12", "9999-01", "9999-12"])
    def test_rejects_years_without_headroom(self, value):
        with pytest.raises(InvalidDateFormat) as exc:
            parse_month(value)
        assert exc.value.reason == "year out of range"

    def test_extreme_years_still_shift(self):
        earliest = resolve_date_range("0002-01", "0002-01")
        assert earliest.shifted(-1).start == utc(1, 12, 1)
        latest = resolve_date_range("9998-12", "9998-12")
        assert latest.end == utc(9998, 12, 31, 23, 59, 59, 999999)


class TestShiftMonths:
    def test_back_one(self):
        assert shift_months(utc(2024, 4, 10), -1) == utc(2024, 3, 10)

    def test_across_year(self):
        assert shift_months(utc(2024, 1, 10), -1) == utc(2023, 12, 10)
        assert shift_months(utc(2024, 12, 10), 1) == utc(2025, 1, 10)

    def test_clamps_day(self):
        assert shift_months(utc(2024, 3, 31), -1) == utc(2024, 2, 29)
        assert shift_months(utc(2023, 3, 31), -1) == utc(2023, 2, 28)

    def test_keeps_time(self):
        assert shift_months(utc(2024, 8, 31, 15, 30), -6) == utc(2024, 2, 29, 15, 30)


class TestMonthHelpers:
    def test_months_between_ignores_days(self):
        assert months_between(utc(2024, 1, 31), utc(2024, 2, 1)) == 1
        assert months_between(utc(2024, 3, 1), utc(2024, 3, 31)) == 0
        assert months_between(utc(2023, 11, 1), utc(2024, 2, 1)) == 3

    def test_start_of_month(self):
        assert start_of_month(utc(2024, 3, 15, 9, 45)) == utc(2024, 3, 1)

    def test_end_of_month(self):
        assert end_of_month(utc(2024, 2, 10)) == utc(2024, 3, 1) - timedelta(microseconds=1)
        assert end_of_month(utc(2024, 12, 1)) == utc(2025, 1, 1) - timedelta(microseconds=1)

    def test_month_key(self):
        assert month_key(utc(2024, 3, 15, 9)) == "2024-03-01T00:00:00.000Z"

    def test_month_key_naive_is_utc(self):
        assert month_key(datetime(2024, 4, 2, 23, 59)) == "2024-04-01T00:00:00.000Z"


class TestResolveDateRange:
    def test_defaults(self):
        r = resolve_date_range(now=NOW)
        assert r.end == NOW
        assert r.start == shift_months(NOW, -6)

    def test_defaults_use_clock(self):
        before = datetime.now(timezone.utc)
        r = resolve_date_range()
        after = datetime.now(timezone.utc)
        assert before <= r.end <= after
        assert r.start == shift_months(r.end, -6)

    def test_explicit_start(self):
        r = resolve_date_range("2024-01", now=NOW)
        assert r.start == utc(2024, 1, 1)
        assert r.end == NOW

    def test_explicit_end_is_last_instant(self):
        r = resolve_date_range("2024-01", "2024-02", now=NOW)
        assert r.end == utc(2024, 2, 29, 23, 59, 59, 999999)

    def test_same_month(self):
        r = resolve_date_range("2024-05", "2024-05", now=NOW)
        assert r.start == utc(2024, 5, 1)
        assert r.end.month == 5 and r.end.day == 31

    def test_custom_lookback(self):
        r = resolve_date_range(now=NOW, lookback_months=1)
        assert r.start == utc(2024, 7, 31, 15, 30)

    def test_invalid_start(self):
        with pytest.raises(InvalidDateFormat):
            resolve_date_range("2024-1", now=NOW)

    def test_invalid_end(self):
        with pytest.raises(InvalidDateFormat):
            resolve_date_range(None, "not-a-month", now=NOW)

    def test_start_after_end(self):
        with pytest.raises(InvalidDateFormat):
            resolve_date_range("2024-06", "2024-03", now=NOW)

    def test_naive_now_treated_as_utc(self):
        r = resolve_date_range(now=datetime(2024, 8, 31, 15, 30))
        assert r.end == NOW


class TestDateRange:
    def test_contains_inclusive(self):
        r = DateRange(utc(2024, 1, 1), utc(2024, 1, 31, 23, 59, 59, 999999))
        assert r.contains(utc(2024, 1, 1))
        assert r.contains(utc(2024, 1, 31, 23, 59, 59, 999999))
        assert not r.contains(utc(2024, 2, 1))
        assert not r.contains(utc(2023, 12, 31, 23, 59))

    def test_shifted(self):
        r = DateRange(utc(2024, 4, 1), end_of_month(utc(2024, 4, 1)))
        prev = r.shifted(-1)
        assert prev.start == utc(2024, 3, 1)
        assert prev.end == utc(2024, 3, 30, 23, 59, 59, 999999)

    def test_months(self):
        assert DateRange(utc(2024, 1, 1), utc(2024, 6, 30)).months == 5
