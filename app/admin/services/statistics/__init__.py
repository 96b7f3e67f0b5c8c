"""Statistics module for revenue reports and rankings.

This module is split into focused parts:
- periods: Day/week/month/year bucket keys and boundaries
- aggregation: Completed line items grouped into revenue buckets
- attribution: Platform/instructor split of gross revenue
- base: Date validation and growth rate
- revenue_service: Revenue report assembly
- rankings_service: Hot courses, top students, instructors and courses
"""

from app.admin.services.statistics.base import (
    calculate_growth_rate,
    parse_report_date,
    validate_date_range,
)
from app.admin.services.statistics.rankings_service import RankingsService
from app.admin.services.statistics.revenue_service import RevenueService

__all__ = [
    # Base utilities
    "calculate_growth_rate",
    "parse_report_date",
    "validate_date_range",
    # Services
    "RankingsService",
    "RevenueService",
]
