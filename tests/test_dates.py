"""Tests for calendar-day helpers shared by capacity counting, queue and dashboard."""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from carequeue.exceptions import ValidationError
from carequeue.shared import dates
from carequeue.shared.validators import parse_date_filter, validate_display_name, validate_future


class TestDayBounds:
    def test_utc_day(self):
        start, end = dates.day_bounds(date(2026, 10, 19))
        assert start == datetime(2026, 10, 19)
        assert end == datetime(2026, 10, 20)

    def test_business_timezone_shifts_bounds(self):
        with patch("carequeue.shared.dates.APP_TIMEZONE", "America/New_York"):
            start, end = dates.day_bounds(date(2026, 10, 19))
        assert start == datetime(2026, 10, 19, 4)
        assert end == datetime(2026, 10, 20, 4)

    def test_dst_day_is_23_hours(self):
        with patch("carequeue.shared.dates.APP_TIMEZONE", "America/New_York"):
            start, end = dates.day_bounds(date(2026, 3, 8))
        assert end - start == timedelta(hours=23)

    def test_local_date_agrees_with_bounds(self):
        with patch("carequeue.shared.dates.APP_TIMEZONE", "Asia/Tokyo"):
            stored = datetime(2026, 10, 19, 16)  # 01:00 on the 20th in Tokyo
            day = dates.local_date(stored)
            start, end = dates.day_bounds(day)
        assert day == date(2026, 10, 20)
        assert start <= stored < end

    def test_unknown_timezone_falls_back_to_utc(self):
        assert str(dates.get_timezone("Not/AZone")) == "UTC"


class TestStorageConversion:
    def test_aware_value_is_converted_to_utc(self):
        value = datetime(2026, 10, 19, 9, tzinfo=timezone(timedelta(hours=2)))
        assert dates.to_storage(value) == datetime(2026, 10, 19, 7)

    def test_naive_value_is_business_local(self):
        with patch("carequeue.shared.dates.APP_TIMEZONE", "America/New_York"):
            assert dates.to_storage(datetime(2026, 10, 19, 9)) == datetime(2026, 10, 19, 13)

    def test_as_utc(self):
        assert dates.as_utc(datetime(2026, 10, 19, 9)).tzinfo == timezone.utc
        assert dates.as_utc(None) is None


class TestValidators:
    def test_future_time_passes(self):
        value = datetime.now(timezone.utc) + timedelta(hours=1)
        assert validate_future(value) == value.replace(tzinfo=None)

    def test_past_time_is_rejected(self):
        with pytest.raises(ValidationError):
            validate_future(datetime.now(timezone.utc) - timedelta(minutes=1))

    def test_date_filter(self):
        assert parse_date_filter("2026-10-19") == date(2026, 10, 19)
        assert parse_date_filter(None) is None
        with pytest.raises(ValidationError):
            parse_date_filter("19/10/2026")

    def test_display_name(self):
        assert validate_display_name("  Jane ") == "Jane"
        with pytest.raises(ValueError):
            validate_display_name("J")
