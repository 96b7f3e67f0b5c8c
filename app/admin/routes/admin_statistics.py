"""Statistics routes for admin dashboard."""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.admin.schemas.admin_statistics import (
    HotCoursesResponse,
    RevenueMode,
    RevenueReportResponse,
    TopInstructorsResponse,
    TopInstructorsSortBy,
    TopRevenueCoursesResponse,
    TopStudentsResponse,
    TopStudentsSortBy,
)
from app.admin.services.statistics import RankingsService, RevenueService, parse_report_date
from app.auth.dependencies import require_admin
from app.auth.models.user import User
from app.core.config import settings
from app.core.constants import DEFAULT_RANKINGS_LIMIT, MAX_PAGE_SIZE
from app.core.rate_limit import limiter
from app.core.schemas import PageParams
from app.db.session import get_db

router = APIRouter(prefix="/statistics", tags=["admin-statistics"])


def get_page_params(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(DEFAULT_RANKINGS_LIMIT, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
) -> PageParams:
    return PageParams(page=page, limit=limit)


@router.get("/revenue", response_model=RevenueReportResponse)
@limiter.limit(settings.STATISTICS_RATE_LIMIT)
async def get_revenue_report(
    request: Request,
    mode: RevenueMode = Query(RevenueMode.MONTH, description="Bucket granularity"),
    start_date: str | None = Query(None, description="First day included (ISO format)"),
    end_date: str | None = Query(None, description="Last day included (ISO format)"),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> RevenueReportResponse:
    """
    Get the platform revenue report.

    Returns:
    - Gross revenue and its platform/creator split
    - Platform share as total_revenue
    - Order, student and course counts
    - Growth of the latest period against the one before
    - One data point per non-empty period
    """
    return RevenueService.get_revenue_report(
        db,
        mode,
        start_date=parse_report_date(start_date, "start_date"),
        end_date=parse_report_date(end_date, "end_date"),
    )


@router.get("/hot-courses", response_model=HotCoursesResponse)
@limiter.limit(settings.STATISTICS_RATE_LIMIT)
async def get_hot_courses(
    request: Request,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> HotCoursesResponse:
    """Get courses ranked by number of enrollments."""
    return RankingsService.get_hot_courses(db, params)


@router.get("/top-students", response_model=TopStudentsResponse)
@limiter.limit(settings.STATISTICS_RATE_LIMIT)
async def get_top_students(
    request: Request,
    sort_by: TopStudentsSortBy = Query(TopStudentsSortBy.TOTAL_SPENT),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> TopStudentsResponse:
    """Get students ranked by total spent or by courses enrolled."""
    return RankingsService.get_top_students(db, params, sort_by)


@router.get("/top-instructors", response_model=TopInstructorsResponse)
@limiter.limit(settings.STATISTICS_RATE_LIMIT)
async def get_top_instructors(
    request: Request,
    sort_by: TopInstructorsSortBy = Query(TopInstructorsSortBy.RATING),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> TopInstructorsResponse:
    """Get instructors ranked by rating, students or number of courses."""
    return RankingsService.get_top_instructors(db, params, sort_by)


@router.get("/top-courses-revenue", response_model=TopRevenueCoursesResponse)
@limiter.limit(settings.STATISTICS_RATE_LIMIT)
async def get_top_courses_by_revenue(
    request: Request,
    start_date: str | None = Query(None, description="First day included (ISO format)"),
    end_date: str | None = Query(None, description="Last day included (ISO format)"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> TopRevenueCoursesResponse:
    """Get courses ranked by gross revenue from completed orders."""
    return RankingsService.get_top_courses_by_revenue(
        db,
        params,
        start_date=parse_report_date(start_date, "start_date"),
        end_date=parse_report_date(end_date, "end_date"),
    )
