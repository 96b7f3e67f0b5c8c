"""Tests for RevenueService.get_revenue_report against a real session."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.admin.schemas.admin_statistics import RevenueMode
from app.admin.services.statistics import revenue_service
from app.admin.services.statistics.revenue_service import RevenueService
from app.core.constants import INSTRUCTOR_REVENUE_PERCENTAGE_KEY
from app.core.exceptions import ServiceUnavailableError, ValidationError
from app.orders.models.order import OrderStatus
from app.settings.services.system_settings_service import SystemSettingsService
from tests.utils.factories import (
    create_course_factory,
    create_enrollment_factory,
    create_order_factory,
    create_user_factory,
)


@pytest.fixture
def marketplace(db_session, test_admin, test_instructor, test_student):
    """One staff course (500k) and one instructor course (300k) sold in May 2024."""
    staff_course = create_course_factory(db_session, test_admin, title="Platform Python")
    instructor_course = create_course_factory(db_session, test_instructor, title="Indie SQL")

    create_order_factory(
        db_session, test_student, [(staff_course, 500000)], completed_at=datetime(2024, 5, 3, 9)
    )
    create_order_factory(
        db_session,
        test_student,
        [(instructor_course, 300000)],
        completed_at=datetime(2024, 5, 20, 15),
    )
    create_enrollment_factory(db_session, test_student, staff_course, datetime(2024, 5, 3, 9))
    create_enrollment_factory(
        db_session, test_student, instructor_course, datetime(2024, 5, 20, 15)
    )
    return staff_course, instructor_course


class TestPlatformReport:
    def test_no_data(self, db_session):
        report = RevenueService.get_revenue_report(db_session, RevenueMode.MONTH)

        assert report.gross_revenue == Decimal("0")
        assert report.total_revenue == Decimal("0")
        assert report.total_orders == 0
        assert report.total_courses == 0
        assert report.average_revenue_per_course == Decimal("0")
        assert report.growth_rate_percent == Decimal("0")
        assert report.monthly_revenue == Decimal("0")
        assert report.details == []

    def test_splits_staff_and_instructor_revenue(self, db_session, marketplace):
        report = RevenueService.get_revenue_report(db_session, RevenueMode.MONTH)

        assert report.gross_revenue == Decimal("800000")
        assert report.total_revenue == Decimal("590000")
        assert report.platform_share == Decimal("590000")
        assert report.creator_share == Decimal("210000")
        assert report.instructor_percentage == Decimal("70")
        assert report.total_orders == 2
        assert report.total_students == 1
        assert report.total_courses == 2
        assert report.average_revenue_per_course == Decimal("295000")

    def test_single_month_bucket(self, db_session, marketplace):
        report = RevenueService.get_revenue_report(db_session, RevenueMode.MONTH)

        [point] = report.details
        assert point.period == "2024-05"
        assert (point.year, point.month) == (2024, 5)
        assert point.start_date == date(2024, 5, 1)
        assert point.end_date == date(2024, 5, 31)
        assert point.revenue == Decimal("590000")
        assert point.order_count == 2
        assert report.monthly_revenue == Decimal("590000")

    def test_day_buckets_and_growth(self, db_session, marketplace):
        report = RevenueService.get_revenue_report(db_session, RevenueMode.DAY)

        assert [p.period for p in report.details] == ["2024-05-03", "2024-05-20"]
        assert [p.gross_revenue for p in report.details] == [Decimal("500000"), Decimal("300000")]
        # Staff course day keeps everything for the platform
        assert report.details[0].creator_share == Decimal("0")
        assert report.growth_rate_percent == Decimal("-40.0")
        assert report.monthly_revenue == Decimal("90000")

    def test_date_range_filters_by_completion(self, db_session, marketplace):
        report = RevenueService.get_revenue_report(
            db_session,
            RevenueMode.DAY,
            start_date=date(2024, 5, 10),
            end_date=date(2024, 5, 20),
        )

        assert report.gross_revenue == Decimal("300000")
        assert report.total_revenue == Decimal("90000")
        assert report.total_students == 1
        assert report.start_date == date(2024, 5, 10)

    def test_end_date_is_inclusive(self, db_session, marketplace):
        report = RevenueService.get_revenue_report(
            db_session, RevenueMode.DAY, start_date=date(2024, 5, 3), end_date=date(2024, 5, 3)
        )
        assert report.gross_revenue == Decimal("500000")

    def test_ignores_orders_that_are_not_completed(
        self, db_session, marketplace, test_student, test_admin
    ):
        course = create_course_factory(db_session, test_admin)
        create_order_factory(
            db_session,
            test_student,
            [(course, 999999)],
            completed_at=datetime(2024, 5, 21),
            status=OrderStatus.PENDING,
        )

        report = RevenueService.get_revenue_report(db_session, RevenueMode.YEAR)
        assert report.gross_revenue == Decimal("800000")

    def test_falls_back_to_created_at(self, db_session, test_instructor, test_student):
        course = create_course_factory(db_session, test_instructor)
        create_order_factory(
            db_session, test_student, [(course, 1000)], created_at=datetime(2023, 2, 14)
        )

        report = RevenueService.get_revenue_report(db_session, RevenueMode.MONTH)
        assert [p.period for p in report.details] == ["2023-02"]

    def test_week_bucket_spans_new_year(self, db_session, test_instructor, test_student):
        course = create_course_factory(db_session, test_instructor)
        create_order_factory(
            db_session, test_student, [(course, 100)], completed_at=datetime(2024, 12, 31, 8)
        )
        create_order_factory(
            db_session, test_student, [(course, 200)], completed_at=datetime(2025, 1, 2, 8)
        )

        report = RevenueService.get_revenue_report(db_session, RevenueMode.WEEK)

        [point] = report.details
        assert point.period == "2025-01"
        assert point.week == 1
        assert point.year == 2025
        assert point.gross_revenue == Decimal("300")


class TestInstructorReport:
    def test_only_own_courses(self, db_session, marketplace, test_instructor):
        report = RevenueService.get_revenue_report(
            db_session, RevenueMode.MONTH, creator_id=test_instructor.id
        )

        assert report.gross_revenue == Decimal("300000")
        assert report.total_revenue == Decimal("210000")
        assert report.creator_share == Decimal("210000")
        assert report.platform_share == Decimal("90000")
        assert report.total_courses == 1
        assert report.details[0].revenue == Decimal("210000")

    def test_instructor_without_sales(self, db_session, marketplace):
        newcomer = create_user_factory(db_session, role="instructor")
        report = RevenueService.get_revenue_report(
            db_session, RevenueMode.MONTH, creator_id=newcomer.id
        )
        assert report.gross_revenue == Decimal("0")
        assert report.total_students == 0

    def test_staff_owned_course_in_creator_view(self, db_session, marketplace, test_admin):
        report = RevenueService.get_revenue_report(
            db_session, RevenueMode.MONTH, creator_id=test_admin.id
        )

        assert report.gross_revenue == Decimal("500000")
        assert report.creator_share == Decimal("0")
        assert report.platform_share == Decimal("500000")
        assert report.total_revenue == Decimal("0")
        assert report.details[0].creator_share == Decimal("0")
        assert report.details[0].revenue == Decimal("0")


class TestPercentageSnapshot:
    def test_uses_configured_percentage(self, db_session, marketplace, test_instructor):
        SystemSettingsService(db_session).update(INSTRUCTOR_REVENUE_PERCENTAGE_KEY, "60")

        report = RevenueService.get_revenue_report(
            db_session, RevenueMode.MONTH, creator_id=test_instructor.id
        )
        assert report.instructor_percentage == Decimal("60")
        assert report.total_revenue == Decimal("180000")

    def test_earlier_report_unchanged_after_update(self, db_session, marketplace, test_instructor):
        before = RevenueService.get_revenue_report(
            db_session, RevenueMode.MONTH, creator_id=test_instructor.id
        )
        SystemSettingsService(db_session).update(INSTRUCTOR_REVENUE_PERCENTAGE_KEY, "50")
        after = RevenueService.get_revenue_report(
            db_session, RevenueMode.MONTH, creator_id=test_instructor.id
        )

        assert before.total_revenue == Decimal("210000")
        assert before.instructor_percentage == Decimal("70")
        assert before.details[0].creator_share == Decimal("210000")
        assert after.total_revenue == Decimal("150000")

    def test_percentage_read_once_per_report(self, db_session, marketplace, monkeypatch):
        calls = []
        unpatched = SystemSettingsService.get_instructor_revenue_percentage

        def counting(self):
            calls.append(1)
            return unpatched(self)

        monkeypatch.setattr(SystemSettingsService, "get_instructor_revenue_percentage", counting)

        RevenueService.get_revenue_report(db_session, RevenueMode.DAY)
        assert len(calls) == 1


class TestErrors:
    def test_reversed_range(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            RevenueService.get_revenue_report(
                db_session,
                RevenueMode.DAY,
                start_date=date(2024, 6, 1),
                end_date=date(2024, 5, 1),
            )
        assert exc_info.value.status_code == 400

    def test_database_failure_is_retryable(self, db_session, monkeypatch):
        def failing(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(revenue_service, "list_completed_order_line_items", failing)

        with pytest.raises(ServiceUnavailableError) as exc_info:
            RevenueService.get_revenue_report(db_session, RevenueMode.MONTH)
        assert exc_info.value.status_code == 503
        assert exc_info.value.details["retryable"] is True
        assert exc_info.value.headers == {"Retry-After": "5"}
