"""Unit tests for calendar day keys."""

import datetime as dt

import pytest

from hostel_ledger.utils.calendar import date_range, day_key, day_key_str, nights_between


class TestDayKey:
    """Tests for day_key normalization."""

    def test_date_is_returned_unchanged(self) -> None:
        assert day_key(dt.date(2024, 1, 1)) == dt.date(2024, 1, 1)

    def test_naive_datetime_drops_time(self) -> None:
        assert day_key(dt.datetime(2024, 1, 1, 23, 59, 59)) == dt.date(2024, 1, 1)

    def test_result_is_plain_date(self) -> None:
        key = day_key(dt.datetime(2024, 1, 1, 12, 0))
        assert type(key) is dt.date

    def test_aware_datetime_keeps_its_own_wall_clock_day(self) -> None:
        """A late-evening local time must not drift to the next UTC day."""
        tz = dt.timezone(dt.timedelta(hours=-5))
        assert day_key(dt.datetime(2024, 1, 1, 23, 30, tzinfo=tz)) == dt.date(2024, 1, 1)

    def test_same_day_different_times_are_equal(self) -> None:
        morning = day_key(dt.datetime(2024, 3, 10, 0, 0))
        night = day_key(dt.datetime(2024, 3, 10, 23, 59))
        assert morning == night

    def test_iso_date_string(self) -> None:
        assert day_key("2024-02-29") == dt.date(2024, 2, 29)

    def test_iso_datetime_string_with_z_suffix(self) -> None:
        assert day_key("2024-01-01T22:15:00Z") == dt.date(2024, 1, 1)

    def test_iso_datetime_string_with_offset(self) -> None:
        assert day_key("2024-01-01T01:00:00+09:00") == dt.date(2024, 1, 1)

    def test_invalid_string_raises_value_error(self) -> None:
        with pytest.raises(ValueError):
            day_key("not-a-date")

    def test_unsupported_type_raises_type_error(self) -> None:
        with pytest.raises(TypeError):
            day_key(20240101)  # type: ignore[arg-type]

    def test_day_key_str_is_iso(self) -> None:
        assert day_key_str(dt.datetime(2024, 1, 5, 8, 0)) == "2024-01-05"


class TestDateRange:
    """Tests for date_range and nights_between."""

    def test_half_open_range(self) -> None:
        days = list(date_range(dt.date(2024, 1, 1), dt.date(2024, 1, 3)))
        assert days == [dt.date(2024, 1, 1), dt.date(2024, 1, 2)]

    def test_empty_when_end_not_after_start(self) -> None:
        assert list(date_range(dt.date(2024, 1, 3), dt.date(2024, 1, 3))) == []
        assert list(date_range(dt.date(2024, 1, 3), dt.date(2024, 1, 1))) == []

    def test_crosses_month_and_leap_day(self) -> None:
        days = list(date_range(dt.date(2024, 2, 28), dt.date(2024, 3, 2)))
        assert days == [dt.date(2024, 2, 28), dt.date(2024, 2, 29), dt.date(2024, 3, 1)]

    def test_nights_between(self) -> None:
        assert nights_between(dt.date(2024, 1, 1), dt.date(2024, 1, 8)) == 7
