"""
Database base module - imports all models for Alembic migration detection.

This module imports all SQLAlchemy models to ensure they are registered
with Alembic for automatic migration generation. While the imports appear
unused, they are essential for the migration system to work properly.
"""

from app.auth.models.user import User
from app.courses.models.comment import Comment
from app.courses.models.course import Category, Course
from app.courses.models.enrollment import Enrollment
from app.db.session import Base
from app.orders.models.order import Order, OrderItem
from app.settings.models.system_setting import SystemSetting

# Export all models for Alembic
__all__ = [
    "Base",
    "User",
    "Category",
    "Course",
    "Comment",
    "Enrollment",
    "Order",
    "OrderItem",
    "SystemSetting",
]
