"""Base utilities and helpers for statistics services."""

from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal

from app.admin.services.statistics.aggregation import RevenueBucket
from app.core.exceptions import ValidationError
from app.core.money import HUNDRED, ZERO, round_one_decimal


def parse_report_date(value: str | date | None, field: str) -> date | None:
    """Parse an ISO-8601 date or datetime query value into a calendar date.

    Args:
        value: ``2024-01-31``, ``2024-01-31T10:00:00Z`` or an existing date.
        field: Query parameter name, reported back on failure.

    Returns:
        The date, or None when the value is empty.

    Raises:
        ValidationError: If the value cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError(f"Invalid date for {field}: {value!r}", field=field) from None

def validate_date_range(start_date: date | None, end_date: date | None) -> None:
    """Reject ranges whose start falls after their end.

    Raises:
        ValidationError: If ``start_date > end_date``.
    """
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date", field="start_date")

def calculate_growth_rate(buckets: Sequence[RevenueBucket]) -> Decimal:
    """Percentage change of gross revenue between the last two buckets.

    Args:
        buckets: Buckets in ascending period order.

    Returns:
        Change rounded half-up to 1 decimal place. 0 when there are fewer
        than two buckets or the previous bucket earned nothing.
    """
    if len(buckets) < 2:
        return ZERO
    latest = buckets[-1].gross_revenue
    previous = buckets[-2].gross_revenue
    if previous == ZERO:
        return ZERO
    return round_one_decimal((latest - previous) / previous * HUNDRED)

