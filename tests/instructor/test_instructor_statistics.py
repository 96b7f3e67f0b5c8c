"""Tests for the instructor dashboard service and routes."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.core.constants import INSTRUCTOR_REVENUE_PERCENTAGE_KEY
from app.instructor.services.instructor_stats_service import InstructorStatsService
from app.settings.services.system_settings_service import SystemSettingsService
from tests.utils.factories import (
    create_comment_factory,
    create_course_factory,
    create_enrollment_factory,
    create_order_factory,
    create_user_factory,
)


@pytest.fixture
def teaching(db_session, test_instructor, test_admin):
    buyers = [create_user_factory(db_session, role="student") for _ in range(2)]
    first = create_course_factory(
        db_session, test_instructor, title="First", average_rating="4.00"
    )
    second = create_course_factory(
        db_session, test_instructor, title="Second", average_rating="4.50"
    )
    staff_course = create_course_factory(db_session, test_admin, title="Staff")

    for buyer in buyers:
        create_enrollment_factory(db_session, buyer, first)
        create_order_factory(db_session, buyer, [(first, 150000)], datetime(2024, 6, 1))
    create_enrollment_factory(db_session, buyers[0], second)
    create_order_factory(db_session, buyers[0], [(staff_course, 500000)], datetime(2024, 6, 2))

    base = datetime(2024, 6, 10)
    for i in range(12):
        create_comment_factory(
            db_session,
            first if i % 2 else second,
            buyers[i % 2],
            content=f"comment {i}",
            created_at=base + timedelta(hours=i),
        )
    return {"first": first, "second": second, "buyers": buyers}


class TestInstructorStatsService:
    def test_totals(self, db_session, teaching, test_instructor):
        stats = InstructorStatsService.get_instructor_stats(db_session, test_instructor.id)

        assert stats.total_courses == 2
        assert stats.total_students == 2
        assert stats.gross_revenue == Decimal("300000")
        assert stats.net_revenue == Decimal("210000")
        assert stats.total_revenue == stats.net_revenue
        assert stats.instructor_percentage == Decimal("70")
        assert stats.total_comments == 12
        assert stats.overall_rating == Decimal("4.3")

    def test_per_course_rows(self, db_session, teaching, test_instructor):
        stats = InstructorStatsService.get_instructor_stats(db_session, test_instructor.id)
        rows = {c.title: c for c in stats.courses}

        assert rows["First"].total_students == 2
        assert rows["First"].gross_revenue == Decimal("300000")
        assert rows["First"].net_revenue == Decimal("210000")
        assert rows["Second"].gross_revenue == Decimal("0")
        assert rows["Second"].total_comments == 6
        assert "Staff" not in rows

    def test_recent_comments_newest_first(self, db_session, teaching, test_instructor):
        stats = InstructorStatsService.get_instructor_stats(db_session, test_instructor.id)

        assert len(stats.recent_comments) == 10
        assert stats.recent_comments[0].content == "comment 11"
        assert stats.recent_comments[0].course_title == "First"

    def test_uses_current_percentage(self, db_session, teaching, test_instructor):
        SystemSettingsService(db_session).update(INSTRUCTOR_REVENUE_PERCENTAGE_KEY, "80")
        stats = InstructorStatsService.get_instructor_stats(db_session, test_instructor.id)
        assert stats.net_revenue == Decimal("240000")

    def test_instructor_without_courses(self, db_session, test_instructor):
        stats = InstructorStatsService.get_instructor_stats(db_session, test_instructor.id)

        assert stats.total_courses == 0
        assert stats.gross_revenue == Decimal("0")
        assert stats.overall_rating == Decimal("0")
        assert stats.courses == []
        assert stats.recent_comments == []

    def test_staff_owned_course_earns_creator_nothing(self, db_session, teaching, test_admin):
        stats = InstructorStatsService.get_instructor_stats(db_session, test_admin.id)

        [row] = stats.courses
        assert row.gross_revenue == Decimal("500000")
        assert row.net_revenue == Decimal("0")
        assert stats.gross_revenue == Decimal("500000")
        assert stats.net_revenue == Decimal("0")


class TestInstructorStatisticsRoutes:
    async def test_dashboard(self, test_client, teaching, instructor_headers):
        response = await test_client.get(
            "/api/v1/instructor/statistics", headers=instructor_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_courses"] == 2
        assert data["gross_revenue"] == 300000
        assert data["net_revenue"] == 210000

    async def test_revenue_report_is_own_share(self, test_client, teaching, instructor_headers):
        response = await test_client.get(
            "/api/v1/instructor/statistics/revenue",
            params={"mode": "month"},
            headers=instructor_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["gross_revenue"] == 300000
        assert data["total_revenue"] == 210000
        assert [d["period"] for d in data["details"]] == ["2024-06"]

    async def test_students_are_forbidden(self, test_client, student_headers):
        response = await test_client.get("/api/v1/instructor/statistics", headers=student_headers)
        assert response.status_code == 403

    @pytest.mark.parametrize(
        "path", ["/api/v1/instructor/statistics", "/api/v1/instructor/statistics/revenue"]
    )
    async def test_admins_are_forbidden(self, test_client, teaching, admin_headers, path):
        response = await test_client.get(path, headers=admin_headers)
        assert response.status_code == 403

    async def test_requires_authentication(self, test_client):
        response = await test_client.get("/api/v1/instructor/statistics/revenue")
        assert response.status_code == 401
