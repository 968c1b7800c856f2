"""Unit tests for calendar arithmetic and date/time literal parsing."""

from datetime import date, datetime

import pytest

from mbusformula.dates import (
    EPOCH,
    add_months,
    days_in_month,
    from_timestamp,
    is_leap_year,
    parse_date_time,
    parse_time_of_day,
    to_timestamp,
)

pytestmark = pytest.mark.calendar


class TestLeapYears:
    """Tests for the Gregorian leap year rule."""

    @pytest.mark.parametrize(
        ("year", "expected"),
        [(2020, True), (2021, False), (2000, True), (2100, False), (1900, False), (2400, True)],
    )
    def test_is_leap_year(self, year: int, expected: bool) -> None:
        """Test divisible by 4, not by 100, unless by 400."""
        assert is_leap_year(year) is expected

    @pytest.mark.parametrize(
        ("year", "month", "expected"),
        [(2020, 2, 29), (2021, 2, 28), (2021, 4, 30), (2021, 12, 31), (2100, 2, 28)],
    )
    def test_days_in_month(self, year: int, month: int, expected: int) -> None:
        """Test month lengths including February."""
        assert days_in_month(year, month) == expected


class TestAddMonths:
    """Tests for add_months."""

    @pytest.mark.parametrize(
        ("start", "months", "expected"),
        [
            (date(2020, 12, 31), 2, date(2021, 2, 28)),
            (date(2020, 12, 31), -10, date(2020, 2, 29)),
            (date(2021, 1, 31), -1, date(2020, 12, 31)),
            (date(2021, 1, 31), -2, date(2020, 11, 30)),
            (date(2021, 1, 31), -24, date(2019, 1, 31)),
            (date(2021, 1, 31), 24, date(2023, 1, 31)),
            (date(2021, 1, 31), 22, date(2022, 11, 30)),
            (date(2021, 2, 28), -12, date(2020, 2, 29)),
            (date(2001, 2, 28), -12, date(2000, 2, 29)),
            (date(2000, 2, 29), 12 * 100, date(2100, 2, 28)),
            (date(2000, 1, 1), 1, date(2000, 2, 1)),
            (date(2021, 1, 15), 0, date(2021, 1, 15)),
            (date(2021, 3, 30), -1, date(2021, 2, 28)),
        ],
    )
    def test_add_months(self, start: date, months: int, expected: date) -> None:
        """Test month arithmetic with clamping and leap years."""
        assert add_months(start, months) == expected

    def test_keeps_time_of_day(self) -> None:
        """Test that a datetime keeps its time of day."""
        assert add_months(datetime(2021, 1, 31, 13, 45, 7), 1) == datetime(2021, 2, 28, 13, 45, 7)

    def test_never_rolls_into_next_month(self) -> None:
        """Test that clamping never produces a day in the following month."""
        for months in range(-30, 31):
            result = add_months(date(2020, 1, 30), months)
            assert result.month == (months % 12) + 1
            assert result.day <= 30


class TestTimestamps:
    """Tests for naive epoch seconds."""

    def test_epoch_is_zero(self) -> None:
        assert to_timestamp(EPOCH) == 0.0

    def test_one_hour(self) -> None:
        assert to_timestamp(datetime(1970, 1, 1, 1, 0, 0)) == 3600.0

    def test_round_trip_before_epoch(self) -> None:
        """Test that timestamps before the epoch are negative and round trip."""
        moment = datetime(1969, 7, 20, 20, 17, 40)
        assert to_timestamp(moment) < 0
        assert from_timestamp(to_timestamp(moment)) == moment


class TestLiteralParsing:
    """Tests for date/time literal parsing."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("2022-02-02", datetime(2022, 2, 2)),
            ("1970-01-01 01:00:00", datetime(1970, 1, 1, 1)),
            ("1970-01-01 01:00", datetime(1970, 1, 1, 1)),
            ("1971-10-01 02:17", datetime(1971, 10, 1, 2, 17)),
        ],
    )
    def test_parse_date_time(self, text: str, expected: datetime) -> None:
        assert parse_date_time(text) == expected

    @pytest.mark.parametrize("text", ["00:15", "2022-13-01", "yesterday", ""])
    def test_parse_date_time_rejects(self, text: str) -> None:
        assert parse_date_time(text) is None

    @pytest.mark.parametrize(("text", "expected"), [("00:15", 900.0), ("00:00:16", 16.0), ("23:59:59", 86399.0)])
    def test_parse_time_of_day(self, text: str, expected: float) -> None:
        assert parse_time_of_day(text) == expected

    @pytest.mark.parametrize("text", ["24:00", "2022-02-02", "noon"])
    def test_parse_time_of_day_rejects(self, text: str) -> None:
        assert parse_time_of_day(text) is None
