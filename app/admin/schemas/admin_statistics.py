"""Statistics schemas for the admin and instructor dashboards."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field

from app.core.datetime_utils import UTCDatetime
from app.core.money import Money, Rate
from app.core.schemas import PaginatedResponse


class RevenueMode(str, Enum):
    """Bucket granularity for revenue reports."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class TopStudentsSortBy(str, Enum):
    TOTAL_SPENT = "total_spent"
    COURSES_ENROLLED = "courses_enrolled"


class TopInstructorsSortBy(str, Enum):
    RATING = "rating"
    STUDENTS = "students"
    COURSES = "courses"


# ============ Revenue Report ============


class RevenueDataPoint(BaseModel):
    """One non-empty period of a revenue report."""

    period: str = Field(description="Bucket key: 2024-01-15, 2024-45, 2024-01 or 2024")
    year: int
    month: int | None = Field(default=None, description="Month (1-12)")
    week: int | None = Field(default=None, description="ISO week (1-53)")
    day: int | None = Field(default=None, description="Day of month (1-31)")
    start_date: date = Field(description="First calendar day of the period")
    end_date: date = Field(description="Last calendar day of the period")
    gross_revenue: Money = Field(description="Revenue before the platform/creator split")
    revenue: Money = Field(description="Requester's share of the period revenue")
    platform_share: Money
    creator_share: Money
    order_count: int = Field(ge=0, description="Distinct completed orders in the period")


class RevenueReportResponse(BaseModel):
    """Time-bucketed revenue report with split and summary totals."""

    mode: RevenueMode
    gross_revenue: Money = Field(description="Total revenue before the split")
    total_revenue: Money = Field(
        description="Requester's share: platform share for admins, creator share for instructors"
    )
    platform_share: Money
    creator_share: Money
    instructor_percentage: Rate = Field(description="Instructor share applied to this report")
    monthly_revenue: Money = Field(description="Requester's share of the latest period")
    total_orders: int
    total_students: int
    total_courses: int
    average_revenue_per_course: Money
    growth_rate_percent: Rate = Field(description="Latest vs previous period, gross, 1 decimal")
    start_date: date | None = None
    end_date: date | None = None
    details: list[RevenueDataPoint]


# ============ Rankings ============


class HotCourseItem(BaseModel):
    """Course ranked by enrollment volume."""

    course_id: str
    course_name: str
    thumbnail: str | None = None
    category_name: str
    price: Money
    total_revenue: Money = Field(description="Lifetime gross revenue from completed orders")
    total_sales: int
    total_students: int
    enrollment_count: int
    average_rating: Rate
    created_at: UTCDatetime
    rank: int = Field(ge=1, description="1-based position across all pages")


class TopStudentItem(BaseModel):
    id: str
    name: str
    email: str
    avatar: str | None = None
    courses_enrolled: int
    total_spent: Money
    last_active: UTCDatetime | None = None
    rank: int = Field(ge=1)


class TopInstructorItem(BaseModel):
    id: str
    full_name: str
    email: str
    avatar: str | None = None
    role: str
    rating: Rate = Field(description="Average rating across the instructor's courses")
    courses: int
    students: int = Field(description="Distinct students enrolled in any of their courses")
    specialties: list[str] = Field(description="Distinct category names they teach in")
    rank: int = Field(ge=1)


class TopRevenueCourseItem(BaseModel):
    course_id: str
    course_name: str
    instructor_name: str
    category_name: str
    gross_revenue: Money
    order_count: int
    rank: int = Field(ge=1)


HotCoursesResponse = PaginatedResponse[HotCourseItem]
TopStudentsResponse = PaginatedResponse[TopStudentItem]
TopInstructorsResponse = PaginatedResponse[TopInstructorItem]
TopRevenueCoursesResponse = PaginatedResponse[TopRevenueCourseItem]
