from datetime import UTC, date, datetime, timedelta
from typing import Annotated
from zoneinfo import ZoneInfo

from pydantic.functional_serializers import PlainSerializer

from app.core.config import settings


def _serialize_utc_datetime(v: datetime | None) -> str | None:
    if v is None:
        return None
    if v.tzinfo is None:
        v = v.replace(tzinfo=UTC)
    return v.isoformat()


UTCDatetime = Annotated[datetime, PlainSerializer(_serialize_utc_datetime)]


def report_timezone() -> ZoneInfo:
    return ZoneInfo(settings.REPORT_TIMEZONE)


def to_report_timezone(moment: datetime) -> datetime:
    """Convert a stored timestamp to the reporting time zone.

    Naive values are stored in UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(report_timezone())


def day_start_utc(day: date) -> datetime:
    """Naive UTC instant at which ``day`` begins in the reporting time zone."""
    local = datetime(day.year, day.month, day.day, tzinfo=report_timezone())
    return local.astimezone(UTC).replace(tzinfo=None)


def day_end_utc(day: date) -> datetime:
    """Naive UTC instant at which the day after ``day`` begins (exclusive bound)."""
    return day_start_utc(day + timedelta(days=1))
