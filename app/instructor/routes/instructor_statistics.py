"""Statistics routes for the instructor dashboard."""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.admin.schemas.admin_statistics import RevenueMode, RevenueReportResponse
from app.admin.services.statistics import RevenueService, parse_report_date
from app.auth.dependencies import require_instructor
from app.auth.models.user import User
from app.core.config import settings
from app.core.rate_limit import limiter
from app.db.session import get_db
from app.instructor.schemas.instructor_statistics import InstructorStatsResponse
from app.instructor.services.instructor_stats_service import InstructorStatsService

router = APIRouter(prefix="/statistics", tags=["instructor-statistics"])


@router.get("", response_model=InstructorStatsResponse)
@limiter.limit(settings.STATISTICS_RATE_LIMIT)
async def get_instructor_stats(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
) -> InstructorStatsResponse:
    """Get lifetime course, student, revenue and comment figures of the caller."""
    return InstructorStatsService.get_instructor_stats(db, current_user.id)


@router.get("/revenue", response_model=RevenueReportResponse)
@limiter.limit(settings.STATISTICS_RATE_LIMIT)
async def get_instructor_revenue_report(
    request: Request,
    mode: RevenueMode = Query(RevenueMode.MONTH, description="Bucket granularity"),
    start_date: str | None = Query(None, description="First day included (ISO format)"),
    end_date: str | None = Query(None, description="Last day included (ISO format)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
) -> RevenueReportResponse:
    """
    Get the revenue report of the caller's own courses.

    total_revenue is the caller's share at the current instructor percentage.
    """
    return RevenueService.get_revenue_report(
        db,
        mode,
        start_date=parse_report_date(start_date, "start_date"),
        end_date=parse_report_date(end_date, "end_date"),
        creator_id=current_user.id,
    )
