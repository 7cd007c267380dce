"""Unit tests for calmaker.date_utils."""

from datetime import date

import pytest

from calmaker.date_utils import (
    add_months,
    add_years,
    coerce_date,
    days_in_month,
    format_date,
    format_time_12h,
    parse_date,
    parse_time,
    week_start,
    weekday_index,
)
from calmaker.exceptions import DateParseError

pytestmark = pytest.mark.unit


class TestParseDate:
    """Tests for parse_date."""

    def test_parse_date_when_valid_then_returns_date(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)

    def test_parse_date_when_surrounded_by_whitespace_then_parses(self):
        assert parse_date(" 2024-02-29 ") == date(2024, 2, 29)

    @pytest.mark.parametrize("value", ["", "2024/01/15", "2024-13-01", "2023-02-29", "tomorrow", "2024-1"])
    def test_parse_date_when_malformed_then_raises(self, value):
        """Malformed strings and non-existent days are rejected."""
        with pytest.raises(DateParseError):
            parse_date(value)

    def test_parse_date_when_not_string_then_raises(self):
        with pytest.raises(DateParseError):
            parse_date(20240115)  # type: ignore[arg-type]

    def test_date_parse_error_is_value_error(self):
        """Callers catching ValueError still see parse failures."""
        with pytest.raises(ValueError):
            parse_date("nope")


class TestCoerceAndFormat:
    def test_coerce_date_accepts_date_and_string(self):
        assert coerce_date(date(2024, 3, 1)) == date(2024, 3, 1)
        assert coerce_date("2024-03-01") == date(2024, 3, 1)

    def test_format_date_zero_pads(self):
        assert format_date(date(2024, 3, 5)) == "2024-03-05"


class TestParseTime:
    """Tests for parse_time and format_time_12h."""

    def test_parse_time_when_valid_then_returns_tuple(self):
        assert parse_time("09:05") == (9, 5)

    @pytest.mark.parametrize("value", ["", "9", "24:00", "12:60", "ab:cd"])
    def test_parse_time_when_invalid_then_raises(self, value):
        with pytest.raises(DateParseError):
            parse_time(value)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("00:00", "12:00 AM"),
            ("09:30", "9:30 AM"),
            ("12:00", "12:00 PM"),
            ("13:05", "1:05 PM"),
        ],
    )
    def test_format_time_12h(self, value, expected):
        assert format_time_12h(value) == expected

    def test_format_time_12h_when_empty_or_invalid(self):
        """Empty input gives empty output; garbage passes through."""
        assert format_time_12h(None) == ""
        assert format_time_12h("later") == "later"


class TestCalendarArithmetic:
    """Tests for month/year shifting and week helpers."""

    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 1, 31), 3) == date(2024, 4, 30)

    def test_add_months_crosses_year_boundary(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)

    def test_add_years_leap_day_falls_back(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)
        assert add_years(date(2024, 2, 29), 4) == date(2028, 2, 29)

    def test_weekday_index_is_sunday_first(self):
        # 2024-01-07 is a Sunday, 2024-01-13 a Saturday
        assert weekday_index(date(2024, 1, 7)) == 0
        assert weekday_index(date(2024, 1, 8)) == 1
        assert weekday_index(date(2024, 1, 13)) == 6

    def test_week_start_returns_sunday(self):
        assert week_start(date(2024, 1, 10)) == date(2024, 1, 7)
        assert week_start(date(2024, 1, 7)) == date(2024, 1, 7)

    def test_days_in_month(self):
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2023, 2) == 28
        assert days_in_month(2024, 4) == 30
