"""Grouping of completed order line items into revenue buckets.

Line items are read once per report and then grouped in memory, so every
figure of a report (buckets, totals, course counts) comes from the same
snapshot. Each bucket sums revenue by creator role in the same pass,
which is all the platform view needs for its per-bucket split.
"""

import enum
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import ColumnElement, func
from sqlalchemy.orm import Query, Session

from app.admin.schemas.admin_statistics import RevenueMode
from app.admin.services.statistics.periods import PeriodBucket, bucket_for
from app.auth.models.user import User
from app.core.constants import ROLE_ADMIN
from app.core.datetime_utils import day_end_utc, day_start_utc
from app.core.money import ZERO, to_decimal
from app.courses.models.course import Course
from app.orders.models.order import Order, OrderItem, OrderStatus


class CreatorRole(str, enum.Enum):
    """Who owns a course, which decides how its revenue is split."""

    PLATFORM_STAFF = "platform_staff"
    INDEPENDENT_INSTRUCTOR = "independent_instructor"

    @classmethod
    def from_user_role(cls, role: str | None) -> "CreatorRole":
        if role == ROLE_ADMIN:
            return cls.PLATFORM_STAFF
        return cls.INDEPENDENT_INSTRUCTOR


@dataclass(frozen=True)
class CompletedLineItem:
    """One course sold in a completed order."""

    order_id: uuid.UUID
    course_id: uuid.UUID
    price: Decimal
    completed_at: datetime
    creator_id: uuid.UUID
    creator_role: CreatorRole


@dataclass(frozen=True)
class RevenueBucket:
    """Revenue of one period.

    ``staff_gross + instructor_gross == gross_revenue``. The share fields
    stay zero until the attribution step fills them.
    """

    period: PeriodBucket
    gross_revenue: Decimal
    order_count: int
    staff_gross: Decimal = ZERO
    instructor_gross: Decimal = ZERO
    platform_share: Decimal = ZERO
    creator_share: Decimal = ZERO

    @property
    def key(self) -> str:
        return self.period.key


@dataclass(frozen=True)
class RangeTotals:
    """Sums over every line item of a report, independent of bucketing."""

    gross_revenue: Decimal
    staff_gross: Decimal
    instructor_gross: Decimal
    order_count: int
    course_count: int


@dataclass
class _Accumulator:
    period: PeriodBucket
    gross_revenue: Decimal = ZERO
    staff_gross: Decimal = ZERO
    instructor_gross: Decimal = ZERO
    order_ids: set[uuid.UUID] = field(default_factory=set)

    def add(self, item: CompletedLineItem) -> None:
        self.gross_revenue += item.price
        if item.creator_role == CreatorRole.PLATFORM_STAFF:
            self.staff_gross += item.price
        else:
            self.instructor_gross += item.price
        self.order_ids.add(item.order_id)

    def freeze(self) -> RevenueBucket:
        return RevenueBucket(
            period=self.period,
            gross_revenue=self.gross_revenue,
            order_count=len(self.order_ids),
            staff_gross=self.staff_gross,
            instructor_gross=self.instructor_gross,
        )


def completed_at_column() -> ColumnElement[datetime]:
    """When an order counts as completed.

    ``payment_completed_at``, or ``created_at`` when the payment time was
    never recorded.
    """
    return func.coalesce(Order.payment_completed_at, Order.created_at)


def completed_line_items_query(
    db: Session,
    *columns: Any,
    creator_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> Query[Any]:
    """Base query over order items of completed orders, joined to their course.

    Rankings group this query by course; reports list it row by row.

    Args:
        db: Database session.
        *columns: Columns or aggregates to select.
        creator_id: Only items of courses created by this user.
        start_date: First day included (reporting time zone).
        end_date: Last day included (reporting time zone).
    """
    completed_at = completed_at_column()
    query = (
        db.query(*columns)
        .select_from(OrderItem)
        .join(Order, Order.id == OrderItem.order_id)
        .join(Course, Course.id == OrderItem.course_id)
        .filter(Order.status == OrderStatus.COMPLETED)
    )
    if creator_id is not None:
        query = query.filter(Course.created_by == creator_id)
    if start_date is not None:
        query = query.filter(completed_at >= day_start_utc(start_date))
    if end_date is not None:
        query = query.filter(completed_at < day_end_utc(end_date))
    return query


def list_completed_order_line_items(
    db: Session,
    creator_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[CompletedLineItem]:
    """Fetch line items of completed orders with their creator's role.

    Returns:
        Line items ordered by completion time.
    """
    completed_at = completed_at_column()
    query = completed_line_items_query(
        db,
        OrderItem.order_id,
        OrderItem.course_id,
        OrderItem.price,
        completed_at.label("completed_at"),
        Course.created_by,
        User.role,
        creator_id=creator_id,
        start_date=start_date,
        end_date=end_date,
    ).join(User, User.id == Course.created_by)

    rows = query.order_by(completed_at, OrderItem.id).all()

    return [
        CompletedLineItem(
            order_id=row.order_id,
            course_id=row.course_id,
            price=to_decimal(row.price),
            completed_at=row.completed_at,
            creator_id=row.created_by,
            creator_role=CreatorRole.from_user_role(row.role),
        )
        for row in rows
    ]


def aggregate(items: Iterable[CompletedLineItem], mode: RevenueMode) -> list[RevenueBucket]:
    """Group line items into period buckets.

    Only periods with at least one item are returned, in ascending key order.
    """
    accumulators: dict[str, _Accumulator] = {}
    for item in items:
        period = bucket_for(item.completed_at, mode)
        accumulator = accumulators.get(period.key)
        if accumulator is None:
            accumulator = accumulators[period.key] = _Accumulator(period=period)
        accumulator.add(item)

    return [accumulators[key].freeze() for key in sorted(accumulators)]


def summarize(items: Iterable[CompletedLineItem]) -> RangeTotals:
    """Range-wide sums used for report totals."""
    gross = staff = instructor = ZERO
    order_ids: set[uuid.UUID] = set()
    course_ids: set[uuid.UUID] = set()
    for item in items:
        gross += item.price
        if item.creator_role == CreatorRole.PLATFORM_STAFF:
            staff += item.price
        else:
            instructor += item.price
        order_ids.add(item.order_id)
        course_ids.add(item.course_id)

    return RangeTotals(
        gross_revenue=gross,
        staff_gross=staff,
        instructor_gross=instructor,
        order_count=len(order_ids),
        course_count=len(course_ids),
    )
