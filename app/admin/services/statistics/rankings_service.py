"""Rankings statistics service."""

import uuid
from collections import defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.admin.schemas.admin_statistics import (
    HotCourseItem,
    HotCoursesResponse,
    TopInstructorItem,
    TopInstructorsResponse,
    TopInstructorsSortBy,
    TopRevenueCourseItem,
    TopRevenueCoursesResponse,
    TopStudentItem,
    TopStudentsResponse,
    TopStudentsSortBy,
)
from app.admin.services.statistics.aggregation import completed_line_items_query
from app.admin.services.statistics.base import validate_date_range
from app.auth.models.user import User
from app.core.constants import ROLE_INSTRUCTOR, ROLE_STUDENT, UNKNOWN_CATEGORY_NAME
from app.core.exceptions import data_access_guard
from app.core.money import ZERO, round_one_decimal, to_decimal
from app.core.schemas import PageParams
from app.courses.models.course import Category, Course
from app.courses.models.enrollment import Enrollment
from app.orders.models.order import Order, OrderItem, OrderStatus


def _completed_revenue_by_course(
    db: Session, course_ids: list[uuid.UUID]
) -> dict[uuid.UUID, tuple[Decimal, int]]:
    """Lifetime gross revenue and completed order count per course."""
    if not course_ids:
        return {}
    rows = (
        completed_line_items_query(
            db,
            OrderItem.course_id,
            func.sum(OrderItem.price).label("revenue"),
            func.count(func.distinct(OrderItem.order_id)).label("orders"),
        )
        .filter(OrderItem.course_id.in_(course_ids))
        .group_by(OrderItem.course_id)
        .all()
    )
    return {r.course_id: (to_decimal(r.revenue), r.orders) for r in rows}


class RankingsService:
    """Service for top-N rankings.

    All rankings are read-only and paginated; ``rank`` is the position across
    all pages, not within the current page.
    """

    @staticmethod
    def get_hot_courses(db: Session, params: PageParams) -> HotCoursesResponse:
        """Get courses ordered by enrollment count.

        Args:
            db: Database session.
            params: Page window.

        Returns:
            Paginated HotCourseItem list with lifetime revenue and category.
        """
        with data_access_guard("hot_courses"):
            enrollment_count = func.count(Enrollment.id).label("enrollment_count")
            stats = (
                db.query(Enrollment.course_id, enrollment_count)
                .join(Course, Course.id == Enrollment.course_id)
                .group_by(Enrollment.course_id, Course.title)
                .order_by(enrollment_count.desc(), Course.title.asc(), Enrollment.course_id)
                .offset(params.offset)
                .limit(params.limit)
                .all()
            )
            total = db.query(func.count(func.distinct(Enrollment.course_id))).scalar() or 0

            course_ids = [s.course_id for s in stats]
            courses = (
                db.query(Course)
                .options(joinedload(Course.category))
                .filter(Course.id.in_(course_ids))
                .all()
                if course_ids
                else []
            )
            revenue_by_course = _completed_revenue_by_course(db, course_ids)

        course_map = {c.id: c for c in courses}
        items = []
        for index, stat in enumerate(stats):
            course = course_map[stat.course_id]
            revenue, _ = revenue_by_course.get(stat.course_id, (ZERO, 0))
            items.append(
                HotCourseItem(
                    course_id=str(course.id),
                    course_name=course.title,
                    thumbnail=course.thumbnail_url,
                    category_name=(
                        course.category.name if course.category else UNKNOWN_CATEGORY_NAME
                    ),
                    price=to_decimal(course.price),
                    total_revenue=revenue,
                    total_sales=stat.enrollment_count,
                    total_students=course.number_of_students or stat.enrollment_count,
                    enrollment_count=stat.enrollment_count,
                    average_rating=to_decimal(course.average_rating),
                    created_at=course.created_at,
                    rank=params.offset + index + 1,
                )
            )

        return HotCoursesResponse.build(items, total, params)

    @staticmethod
    def get_top_students(
        db: Session,
        params: PageParams,
        sort_by: TopStudentsSortBy = TopStudentsSortBy.TOTAL_SPENT,
    ) -> TopStudentsResponse:
        """Get students ranked by spend or by enrollment count.

        Args:
            db: Database session.
            params: Page window.
            sort_by: Primary metric; the other one breaks ties.

        Returns:
            Paginated TopStudentItem list.
        """
        spend = (
            db.query(
                Order.user_id.label("user_id"),
                func.sum(Order.total_price).label("total_spent"),
            )
            .filter(Order.status == OrderStatus.COMPLETED)
            .group_by(Order.user_id)
            .subquery()
        )
        enrolled = (
            db.query(
                Enrollment.user_id.label("user_id"),
                func.count(Enrollment.id).label("courses_enrolled"),
            )
            .group_by(Enrollment.user_id)
            .subquery()
        )
        total_spent = func.coalesce(spend.c.total_spent, 0).label("total_spent")
        courses_enrolled = func.coalesce(enrolled.c.courses_enrolled, 0).label("courses_enrolled")

        if sort_by == TopStudentsSortBy.COURSES_ENROLLED:
            ordering = [courses_enrolled.desc(), total_spent.desc()]
        else:
            ordering = [total_spent.desc(), courses_enrolled.desc()]

        with data_access_guard("top_students"):
            rows = (
                db.query(User, total_spent, courses_enrolled)
                .outerjoin(spend, spend.c.user_id == User.id)
                .outerjoin(enrolled, enrolled.c.user_id == User.id)
                .filter(User.role == ROLE_STUDENT)
                .order_by(*ordering, User.full_name.asc(), User.id)
                .offset(params.offset)
                .limit(params.limit)
                .all()
            )
            total = db.query(func.count(User.id)).filter(User.role == ROLE_STUDENT).scalar() or 0

        items = [
            TopStudentItem(
                id=str(user.id),
                name=user.full_name,
                email=user.email,
                avatar=user.avatar_url,
                courses_enrolled=row_courses,
                total_spent=to_decimal(row_spent),
                last_active=user.last_active_at,
                rank=params.offset + index + 1,
            )
            for index, (user, row_spent, row_courses) in enumerate(rows)
        ]
        return TopStudentsResponse.build(items, total, params)

    @staticmethod
    def get_top_instructors(
        db: Session,
        params: PageParams,
        sort_by: TopInstructorsSortBy = TopInstructorsSortBy.RATING,
    ) -> TopInstructorsResponse:
        """Get independent instructors ranked by rating, students or courses.

        Args:
            db: Database session.
            params: Page window.
            sort_by: Primary metric.

        Returns:
            Paginated TopInstructorItem list with the categories they teach in.
        """
        course_stats = (
            db.query(
                Course.created_by.label("user_id"),
                func.count(Course.id).label("courses"),
                func.avg(Course.average_rating).label("rating"),
            )
            .group_by(Course.created_by)
            .subquery()
        )
        student_stats = (
            db.query(
                Course.created_by.label("user_id"),
                func.count(func.distinct(Enrollment.user_id)).label("students"),
            )
            .join(Enrollment, Enrollment.course_id == Course.id)
            .group_by(Course.created_by)
            .subquery()
        )
        rating = func.coalesce(course_stats.c.rating, 0).label("rating")
        courses = func.coalesce(course_stats.c.courses, 0).label("courses")
        students = func.coalesce(student_stats.c.students, 0).label("students")

        primary = {
            TopInstructorsSortBy.RATING: rating,
            TopInstructorsSortBy.STUDENTS: students,
            TopInstructorsSortBy.COURSES: courses,
        }[sort_by]
        tie_breakers = [c for c in (rating, students, courses) if c is not primary]

        with data_access_guard("top_instructors"):
            rows = (
                db.query(User, rating, courses, students)
                .outerjoin(course_stats, course_stats.c.user_id == User.id)
                .outerjoin(student_stats, student_stats.c.user_id == User.id)
                .filter(User.role == ROLE_INSTRUCTOR)
                .order_by(
                    primary.desc(),
                    *(c.desc() for c in tie_breakers),
                    User.full_name.asc(),
                    User.id,
                )
                .offset(params.offset)
                .limit(params.limit)
                .all()
            )
            total = (
                db.query(func.count(User.id)).filter(User.role == ROLE_INSTRUCTOR).scalar() or 0
            )
            specialties = RankingsService._specialties(db, [user.id for user, *_ in rows])

        items = [
            TopInstructorItem(
                id=str(user.id),
                full_name=user.full_name,
                email=user.email,
                avatar=user.avatar_url,
                role=user.role,
                rating=round_one_decimal(to_decimal(row_rating)),
                courses=row_courses,
                students=row_students,
                specialties=specialties.get(user.id, []),
                rank=params.offset + index + 1,
            )
            for index, (user, row_rating, row_courses, row_students) in enumerate(rows)
        ]
        return TopInstructorsResponse.build(items, total, params)

    @staticmethod
    def _specialties(db: Session, instructor_ids: list[uuid.UUID]) -> dict[uuid.UUID, list[str]]:
        """Distinct category names per instructor, alphabetically."""
        if not instructor_ids:
            return {}
        rows = (
            db.query(Course.created_by, Category.name)
            .join(Category, Category.id == Course.category_id)
            .filter(Course.created_by.in_(instructor_ids))
            .distinct()
            .all()
        )
        names: dict[uuid.UUID, set[str]] = defaultdict(set)
        for creator_id, name in rows:
            names[creator_id].add(name)
        return {creator_id: sorted(values) for creator_id, values in names.items()}

    @staticmethod
    def get_top_courses_by_revenue(
        db: Session,
        params: PageParams,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> TopRevenueCoursesResponse:
        """Get courses ranked by gross revenue from completed orders.

        Courses without revenue in the range are left out.

        Args:
            db: Database session.
            params: Page window.
            start_date: First completion day included.
            end_date: Last completion day included.

        Returns:
            Paginated TopRevenueCourseItem list.
        """
        validate_date_range(start_date, end_date)

        revenue = func.sum(OrderItem.price).label("gross_revenue")
        order_count = func.count(func.distinct(OrderItem.order_id)).label("order_count")

        with data_access_guard("top_courses_by_revenue"):
            grouped = (
                completed_line_items_query(
                    db,
                    OrderItem.course_id,
                    revenue,
                    order_count,
                    start_date=start_date,
                    end_date=end_date,
                )
                .group_by(OrderItem.course_id)
                .having(func.sum(OrderItem.price) > 0)
            )
            total = db.query(func.count()).select_from(grouped.subquery()).scalar() or 0
            stats = (
                grouped.order_by(revenue.desc(), OrderItem.course_id)
                .offset(params.offset)
                .limit(params.limit)
                .all()
            )

            course_ids = [s.course_id for s in stats]
            courses = (
                db.query(Course)
                .options(joinedload(Course.category), joinedload(Course.creator))
                .filter(Course.id.in_(course_ids))
                .all()
                if course_ids
                else []
            )

        course_map = {c.id: c for c in courses}
        items = []
        for index, stat in enumerate(stats):
            course = course_map[stat.course_id]
            items.append(
                TopRevenueCourseItem(
                    course_id=str(course.id),
                    course_name=course.title,
                    instructor_name=course.creator.full_name,
                    category_name=(
                        course.category.name if course.category else UNKNOWN_CATEGORY_NAME
                    ),
                    gross_revenue=to_decimal(stat.gross_revenue),
                    order_count=stat.order_count,
                    rank=params.offset + index + 1,
                )
            )

        return TopRevenueCoursesResponse.build(items, total, params)
