"""Instructor dashboard statistics."""

import uuid
from decimal import Decimal

import structlog
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.admin.services.statistics.aggregation import CreatorRole, completed_line_items_query
from app.admin.services.statistics.attribution import (
    AttributionPercentage,
    RevenueSplit,
    split_for_platform,
)
from app.auth.models.user import User
from app.core.constants import RECENT_COMMENTS_LIMIT
from app.core.exceptions import data_access_guard
from app.core.money import ZERO, round_one_decimal, to_decimal
from app.courses.models.comment import Comment
from app.courses.models.course import Course
from app.courses.models.enrollment import Enrollment
from app.instructor.schemas.instructor_statistics import (
    InstructorCourseStats,
    InstructorStatsResponse,
    RecentComment,
)
from app.orders.models.order import OrderItem
from app.settings.services.system_settings_service import SystemSettingsService

logger = structlog.get_logger(__name__)


def _creator_split(
    gross: Decimal, role: CreatorRole, percentage: AttributionPercentage
) -> RevenueSplit:
    if role == CreatorRole.PLATFORM_STAFF:
        return split_for_platform(gross, ZERO, percentage)
    return split_for_platform(ZERO, gross, percentage)


class InstructorStatsService:
    """Lifetime dashboard figures for one instructor."""

    @staticmethod
    def get_instructor_stats(db: Session, instructor_id: uuid.UUID) -> InstructorStatsResponse:
        """Collect course, student, revenue and comment figures.

        Net revenue uses the instructor percentage as read at the start of
        the call, for every course and for the total. Courses owned by
        platform staff earn their creator nothing.

        Raises:
            ServiceUnavailableError: If the database cannot be read.
        """
        with data_access_guard("instructor_stats"):
            percentage = AttributionPercentage(
                SystemSettingsService(db).get_instructor_revenue_percentage()
            )
            owner_role = CreatorRole.from_user_role(
                db.query(User.role).filter(User.id == instructor_id).scalar()
            )
            courses = (
                db.query(Course)
                .filter(Course.created_by == instructor_id)
                .order_by(Course.created_at.desc(), Course.id)
                .all()
            )
            course_ids = [c.id for c in courses]

            revenue_rows = (
                completed_line_items_query(
                    db,
                    OrderItem.course_id,
                    func.sum(OrderItem.price).label("revenue"),
                    creator_id=instructor_id,
                )
                .group_by(OrderItem.course_id)
                .all()
            )
            student_rows = (
                db.query(Enrollment.course_id, func.count(Enrollment.id))
                .filter(Enrollment.course_id.in_(course_ids))
                .group_by(Enrollment.course_id)
                .all()
                if course_ids
                else []
            )
            total_students = (
                db.query(func.count(func.distinct(Enrollment.user_id)))
                .join(Course, Course.id == Enrollment.course_id)
                .filter(Course.created_by == instructor_id)
                .scalar()
                or 0
            )
            comment_rows = (
                db.query(Comment.course_id, func.count(Comment.id))
                .filter(Comment.course_id.in_(course_ids))
                .group_by(Comment.course_id)
                .all()
                if course_ids
                else []
            )
            recent = (
                db.query(Comment)
                .options(joinedload(Comment.course), joinedload(Comment.user))
                .filter(Comment.course_id.in_(course_ids))
                .order_by(Comment.created_at.desc(), Comment.id)
                .limit(RECENT_COMMENTS_LIMIT)
                .all()
                if course_ids
                else []
            )

        revenue_by_course = {row.course_id: to_decimal(row.revenue) for row in revenue_rows}
        students_by_course = dict(student_rows)
        comments_by_course = dict(comment_rows)

        course_stats = []
        for course in courses:
            gross = revenue_by_course.get(course.id, ZERO)
            course_stats.append(
                InstructorCourseStats(
                    course_id=str(course.id),
                    title=course.title,
                    thumbnail=course.thumbnail_url,
                    is_published=course.is_published,
                    total_students=students_by_course.get(course.id, 0),
                    gross_revenue=gross,
                    net_revenue=_creator_split(gross, owner_role, percentage).creator_share,
                    average_rating=round_one_decimal(to_decimal(course.average_rating)),
                    total_comments=comments_by_course.get(course.id, 0),
                )
            )

        gross_revenue = sum(revenue_by_course.values(), ZERO)
        net_revenue = _creator_split(gross_revenue, owner_role, percentage).creator_share
        overall_rating = (
            round_one_decimal(
                sum((to_decimal(c.average_rating) for c in courses), ZERO) / len(courses)
            )
            if courses
            else ZERO
        )

        logger.info(
            "instructor_stats_computed",
            instructor_id=str(instructor_id),
            courses=len(courses),
            instructor_percentage=str(percentage.instructor_percent),
        )

        return InstructorStatsResponse(
            total_courses=len(courses),
            total_students=total_students,
            gross_revenue=gross_revenue,
            net_revenue=net_revenue,
            total_revenue=net_revenue,
            instructor_percentage=percentage.instructor_percent,
            total_comments=sum(comments_by_course.values()),
            overall_rating=overall_rating,
            courses=course_stats,
            recent_comments=[
                RecentComment(
                    id=str(comment.id),
                    course_id=str(comment.course_id),
                    course_title=comment.course.title,
                    user_name=comment.user.full_name if comment.user else None,
                    content=comment.content,
                    rating=comment.rating,
                    created_at=comment.created_at,
                )
                for comment in recent
            ],
        )
