"""Revenue report assembly."""

import uuid
from datetime import date
from decimal import Decimal

import structlog
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.admin.schemas.admin_statistics import (
    RevenueDataPoint,
    RevenueMode,
    RevenueReportResponse,
)
from app.admin.services.statistics.aggregation import (
    RevenueBucket,
    aggregate,
    list_completed_order_line_items,
    summarize,
)
from app.admin.services.statistics.attribution import (
    AttributionPercentage,
    AttributionView,
    RevenueSplit,
    attribute_buckets,
    attribute_totals,
)
from app.admin.services.statistics.base import calculate_growth_rate, validate_date_range
from app.core.datetime_utils import day_end_utc, day_start_utc
from app.core.exceptions import data_access_guard
from app.core.money import ZERO, round_money
from app.courses.models.course import Course
from app.courses.models.enrollment import Enrollment
from app.settings.services.system_settings_service import SystemSettingsService

logger = structlog.get_logger(__name__)


def _share_of(bucket: RevenueBucket, view: AttributionView) -> Decimal:
    return RevenueSplit(bucket.platform_share, bucket.creator_share).share_for(view)


class RevenueService:
    """Service for time-bucketed revenue reports."""

    @staticmethod
    def count_students(
        db: Session,
        creator_id: uuid.UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> int:
        """Count distinct users enrolled in the report's scope.

        Args:
            db: Database session.
            creator_id: Only enrollments in courses created by this user.
            start_date: First enrollment day included.
            end_date: Last enrollment day included.

        Returns:
            Number of distinct enrolled users.
        """
        query = db.query(func.count(func.distinct(Enrollment.user_id)))
        if creator_id is not None:
            query = query.join(Course, Course.id == Enrollment.course_id).filter(
                Course.created_by == creator_id
            )
        if start_date is not None:
            query = query.filter(Enrollment.enrolled_at >= day_start_utc(start_date))
        if end_date is not None:
            query = query.filter(Enrollment.enrolled_at < day_end_utc(end_date))
        return query.scalar() or 0

    @staticmethod
    def get_revenue_report(
        db: Session,
        mode: RevenueMode,
        start_date: date | None = None,
        end_date: date | None = None,
        creator_id: uuid.UUID | None = None,
    ) -> RevenueReportResponse:
        """Build a revenue report.

        Without ``creator_id`` this is the platform view: all creators, with
        the platform share as ``total_revenue``. With ``creator_id`` it is
        that instructor's private view and ``total_revenue`` is their share.

        The instructor percentage is read once here and the same snapshot is
        applied to every bucket and to the totals.

        Args:
            db: Database session.
            mode: Bucket granularity.
            start_date: First day included.
            end_date: Last day included.
            creator_id: Restrict to one instructor's courses.

        Returns:
            RevenueReportResponse with per-period details and summary totals.

        Raises:
            ValidationError: If the range is reversed.
            ServiceUnavailableError: If the database cannot be read.
        """
        validate_date_range(start_date, end_date)
        view = AttributionView.INSTRUCTOR if creator_id is not None else AttributionView.PLATFORM

        with data_access_guard("revenue_report"):
            percentage = AttributionPercentage(
                SystemSettingsService(db).get_instructor_revenue_percentage()
            )
            items = list_completed_order_line_items(db, creator_id, start_date, end_date)
            total_students = RevenueService.count_students(db, creator_id, start_date, end_date)

        buckets = attribute_buckets(aggregate(items, mode), percentage)
        totals = summarize(items)
        split = attribute_totals(totals, percentage)
        total_revenue = split.share_for(view)

        average_per_course = (
            round_money(total_revenue / totals.course_count) if totals.course_count else ZERO
        )
        latest_share = _share_of(buckets[-1], view) if buckets else ZERO

        logger.info(
            "revenue_report_computed",
            mode=mode.value,
            view=view.value,
            creator_id=str(creator_id) if creator_id else None,
            buckets=len(buckets),
            line_items=len(items),
            instructor_percentage=str(percentage.instructor_percent),
        )

        return RevenueReportResponse(
            mode=mode,
            gross_revenue=totals.gross_revenue,
            total_revenue=total_revenue,
            platform_share=split.platform_share,
            creator_share=split.creator_share,
            instructor_percentage=percentage.instructor_percent,
            monthly_revenue=latest_share,
            total_orders=totals.order_count,
            total_students=total_students,
            total_courses=totals.course_count,
            average_revenue_per_course=average_per_course,
            growth_rate_percent=calculate_growth_rate(buckets),
            start_date=start_date,
            end_date=end_date,
            details=[RevenueService._to_data_point(bucket, view) for bucket in buckets],
        )

    @staticmethod
    def _to_data_point(bucket: RevenueBucket, view: AttributionView) -> RevenueDataPoint:
        period = bucket.period
        return RevenueDataPoint(
            period=period.key,
            year=period.year,
            month=period.month,
            week=period.week,
            day=period.day,
            start_date=period.start,
            end_date=period.end,
            gross_revenue=bucket.gross_revenue,
            revenue=_share_of(bucket, view),
            platform_share=bucket.platform_share,
            creator_share=bucket.creator_share,
            order_count=bucket.order_count,
        )
