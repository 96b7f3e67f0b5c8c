"""Course catalog models."""

from app.courses.models.comment import Comment
from app.courses.models.course import Category, Course
from app.courses.models.enrollment import Enrollment

__all__ = [
    "Category",
    "Course",
    "Comment",
    "Enrollment",
]
