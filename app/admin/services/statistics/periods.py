"""Calendar bucketing for revenue reports.

Every timestamp maps to exactly one bucket per mode. Bucket keys are
zero-padded so that plain string ordering is chronological:

- day:   ``YYYY-MM-DD``
- week:  ``YYYY-WW`` (ISO-8601 year and week; weeks start on Monday and
  week 1 holds the year's first Thursday)
- month: ``YYYY-MM``
- year:  ``YYYY``

Week keys use the ISO year, which differs from the calendar year around
New Year: 2024-12-31 is in ``2025-01`` and 2021-01-03 is in ``2020-53``.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from app.admin.schemas.admin_statistics import RevenueMode
from app.core.datetime_utils import to_report_timezone


@dataclass(frozen=True)
class PeriodBucket:
    """A calendar period with inclusive start and end dates."""

    key: str
    start: date
    end: date
    year: int
    month: int | None = None
    week: int | None = None
    day: int | None = None


def iso_week_start(year: int, week: int) -> date:
    """Monday of ISO ``week`` in ISO ``year``.

    Starts from January 1st, moves to the Monday of ISO week 1, then adds
    ``week - 1`` weeks. Week 1 can begin as early as December 29th of the
    previous calendar year.
    """
    jan_1 = date(year, 1, 1)
    week_one_monday = jan_1 - timedelta(days=jan_1.weekday())
    # Jan 1 on Friday-Sunday still belongs to the previous ISO year
    if jan_1.isoweekday() > 4:
        week_one_monday += timedelta(weeks=1)
    return week_one_monday + timedelta(weeks=week - 1)


def _to_local_date(moment: datetime | date) -> date:
    if isinstance(moment, datetime):
        return to_report_timezone(moment).date()
    return moment


def _day_bucket(day: date) -> PeriodBucket:
    return PeriodBucket(
        key=day.strftime("%Y-%m-%d"),
        start=day,
        end=day,
        year=day.year,
        month=day.month,
        day=day.day,
    )


def _week_bucket(iso_year: int, iso_week: int) -> PeriodBucket:
    start = iso_week_start(iso_year, iso_week)
    return PeriodBucket(
        key=f"{iso_year:04d}-{iso_week:02d}",
        start=start,
        end=start + timedelta(days=6),
        year=iso_year,
        week=iso_week,
    )


def _month_bucket(year: int, month: int) -> PeriodBucket:
    last_day = calendar.monthrange(year, month)[1]
    return PeriodBucket(
        key=f"{year:04d}-{month:02d}",
        start=date(year, month, 1),
        end=date(year, month, last_day),
        year=year,
        month=month,
    )


def _year_bucket(year: int) -> PeriodBucket:
    return PeriodBucket(
        key=f"{year:04d}",
        start=date(year, 1, 1),
        end=date(year, 12, 31),
        year=year,
    )


def bucket_for(moment: datetime | date, mode: RevenueMode) -> PeriodBucket:
    """Return the bucket ``moment`` falls into.

    Datetimes are converted to the reporting time zone first; naive values
    are treated as UTC.
    """
    day = _to_local_date(moment)

    if mode == RevenueMode.DAY:
        return _day_bucket(day)
    if mode == RevenueMode.WEEK:
        iso_year, iso_week, _ = day.isocalendar()
        return _week_bucket(iso_year, iso_week)
    if mode == RevenueMode.MONTH:
        return _month_bucket(day.year, day.month)
    if mode == RevenueMode.YEAR:
        return _year_bucket(day.year)
    raise ValueError(f"Unsupported revenue mode: {mode}")
