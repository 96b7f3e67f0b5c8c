"""Schemas for the instructor dashboard."""

from pydantic import BaseModel, Field

from app.core.datetime_utils import UTCDatetime
from app.core.money import Money, Rate


class InstructorCourseStats(BaseModel):
    course_id: str
    title: str
    thumbnail: str | None = None
    is_published: bool
    total_students: int = Field(ge=0)
    gross_revenue: Money
    net_revenue: Money = Field(description="Instructor share of the course revenue")
    average_rating: Rate
    total_comments: int = Field(ge=0)


class RecentComment(BaseModel):
    id: str
    course_id: str
    course_title: str
    user_name: str | None = None
    content: str
    rating: int | None = None
    created_at: UTCDatetime


class InstructorStatsResponse(BaseModel):
    """Lifetime figures across all of an instructor's courses."""

    total_courses: int = Field(ge=0)
    total_students: int = Field(ge=0, description="Distinct users enrolled in any course")
    gross_revenue: Money
    net_revenue: Money = Field(description="Instructor share at the current percentage")
    total_revenue: Money = Field(description="Same as net_revenue")
    instructor_percentage: Rate
    total_comments: int = Field(ge=0)
    overall_rating: Rate = Field(description="Mean course rating, 1 decimal")
    courses: list[InstructorCourseStats]
    recent_comments: list[RecentComment]
