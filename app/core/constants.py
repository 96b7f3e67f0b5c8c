"""Application-wide constants.

This module centralizes magic numbers and configuration constants
that are used across multiple modules. For environment-specific
configuration, see config.py.
"""

from decimal import Decimal

# =============================================================================
# Pagination Defaults
# =============================================================================

# Default page size for ranking endpoints
DEFAULT_RANKINGS_LIMIT: int = 10

# Maximum page size to prevent abuse
MAX_PAGE_SIZE: int = 100

# Number of recent comments on the instructor dashboard
RECENT_COMMENTS_LIMIT: int = 10

# =============================================================================
# System Settings
# =============================================================================

# Key of the instructor revenue share in the system_settings table
INSTRUCTOR_REVENUE_PERCENTAGE_KEY: str = "instructor_revenue_percentage"

# Bounds for the instructor revenue share (percent)
MIN_REVENUE_PERCENTAGE: Decimal = Decimal("0")
MAX_REVENUE_PERCENTAGE: Decimal = Decimal("100")

# =============================================================================
# User Roles
# =============================================================================

ROLE_ADMIN: str = "admin"
ROLE_INSTRUCTOR: str = "instructor"
ROLE_STUDENT: str = "student"

# Fallback label for courses without a category
UNKNOWN_CATEGORY_NAME: str = "Unknown"

# =============================================================================
# Resilience
# =============================================================================

# Retry-After hint (seconds) when the database is temporarily unavailable
SERVICE_UNAVAILABLE_RETRY_AFTER_SECONDS: int = 5
