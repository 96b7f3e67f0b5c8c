"""Core schema definitions shared by list and ranking endpoints."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(None, description="Additional error context")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = False
    error: ErrorDetail


class PageParams(BaseModel):
    """Resolved 1-based pagination window."""

    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def count_pages(total: int, limit: int) -> int:
    """Number of pages needed for ``total`` items, 0 when there are none."""
    return (total + limit - 1) // limit if limit > 0 else 0


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated list response.

    Example:
        {
            "items": [ ... ],
            "total": 42,
            "page": 2,
            "limit": 10,
            "total_pages": 5
        }
    """

    items: list[T]
    total: int = Field(..., ge=0, description="Total number of items")
    page: int = Field(..., ge=1, description="Current page number")
    limit: int = Field(..., ge=1, description="Items per page")
    total_pages: int = Field(..., ge=0, description="Total number of pages")

    @classmethod
    def build(cls, items: list[T], total: int, params: PageParams) -> "PaginatedResponse[T]":
        return cls(
            items=items,
            total=total,
            page=params.page,
            limit=params.limit,
            total_pages=count_pages(total, params.limit),
        )
