"""Unit tests for period bucketing."""

from datetime import UTC, date, datetime

import pytest

from app.admin.schemas.admin_statistics import RevenueMode
from app.admin.services.statistics.periods import bucket_for, iso_week_start
from app.core.config import settings


class TestIsoWeekStart:
    def test_week_one_starting_in_previous_year(self):
        # Jan 1 2025 is a Wednesday
        assert iso_week_start(2025, 1) == date(2024, 12, 30)

    def test_week_one_when_jan_first_is_monday(self):
        assert iso_week_start(2024, 1) == date(2024, 1, 1)

    def test_week_one_when_jan_first_is_friday(self):
        # Jan 1 2021 is a Friday and still belongs to 2020-W53
        assert iso_week_start(2021, 1) == date(2021, 1, 4)

    def test_week_fifty_three(self):
        assert iso_week_start(2020, 53) == date(2020, 12, 28)

    @pytest.mark.parametrize("year", [2019, 2020, 2021, 2022, 2023, 2024, 2025, 2026])
    def test_matches_iso_calendar(self, year):
        for week in (1, 10, 26, 52):
            assert iso_week_start(year, week) == date.fromisocalendar(year, week, 1)


class TestBucketFor:
    def test_day_key(self):
        bucket = bucket_for(datetime(2024, 3, 5, 10, 30), RevenueMode.DAY)
        assert bucket.key == "2024-03-05"
        assert bucket.start == bucket.end == date(2024, 3, 5)
        assert (bucket.year, bucket.month, bucket.day) == (2024, 3, 5)

    def test_week_belongs_to_next_iso_year(self):
        bucket = bucket_for(date(2024, 12, 31), RevenueMode.WEEK)
        assert bucket.key == "2025-01"
        assert bucket.year == 2025
        assert bucket.week == 1
        assert bucket.start == date(2024, 12, 30)
        assert bucket.end == date(2025, 1, 5)

    def test_week_on_new_year_monday(self):
        assert bucket_for(date(2024, 1, 1), RevenueMode.WEEK).key == "2024-01"

    def test_week_belongs_to_previous_iso_year(self):
        bucket = bucket_for(date(2021, 1, 3), RevenueMode.WEEK)
        assert bucket.key == "2020-53"
        assert bucket.week == 53

    def test_month_bounds_in_leap_year(self):
        bucket = bucket_for(datetime(2024, 2, 29, 23, 59, 59), RevenueMode.MONTH)
        assert bucket.key == "2024-02"
        assert bucket.start == date(2024, 2, 1)
        assert bucket.end == date(2024, 2, 29)

    def test_year_bucket(self):
        bucket = bucket_for(datetime(2023, 7, 4), RevenueMode.YEAR)
        assert bucket.key == "2023"
        assert bucket.start == date(2023, 1, 1)
        assert bucket.end == date(2023, 12, 31)
        assert bucket.month is None

    def test_aware_datetime_converted_to_report_timezone(self, monkeypatch):
        monkeypatch.setattr(settings, "REPORT_TIMEZONE", "Asia/Ho_Chi_Minh")
        moment = datetime(2024, 1, 31, 18, 0, tzinfo=UTC)  # Feb 1, 01:00 in UTC+7
        assert bucket_for(moment, RevenueMode.MONTH).key == "2024-02"

    def test_naive_datetime_treated_as_utc(self, monkeypatch):
        monkeypatch.setattr(settings, "REPORT_TIMEZONE", "America/New_York")
        assert bucket_for(datetime(2024, 3, 1, 2, 0), RevenueMode.DAY).key == "2024-02-29"

    def test_keys_sort_chronologically(self):
        moments = [date(2024, 1, 8), date(2023, 12, 31), date(2024, 11, 4), date(2024, 2, 1)]
        for mode in RevenueMode:
            keys = [bucket_for(m, mode).key for m in moments]
            ordered = [bucket_for(m, mode).key for m in sorted(moments)]
            assert sorted(keys) == ordered
