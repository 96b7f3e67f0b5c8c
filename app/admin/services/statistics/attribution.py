"""Platform/creator revenue split.

Independent instructors receive ``p`` percent of the revenue of their own
courses and the platform keeps ``100 - p``. Courses owned by platform staff
are never split: the platform keeps all of it.

Each share is rounded half-up to a whole currency unit on its own, so
``platform_share + creator_share`` may differ from the rounded gross by at
most one unit per split.
"""

import enum
from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from app.admin.services.statistics.aggregation import RangeTotals, RevenueBucket
from app.core.constants import MAX_REVENUE_PERCENTAGE, MIN_REVENUE_PERCENTAGE
from app.core.money import HUNDRED, round_money


class AttributionView(str, enum.Enum):
    """Whose share a report is about."""

    PLATFORM = "platform"
    INSTRUCTOR = "instructor"


@dataclass(frozen=True)
class AttributionPercentage:
    """Snapshot of the instructor revenue percentage for one computation.

    Read once from the settings store when a report starts and passed to
    every split of that report, so a concurrent settings update cannot make
    one report internally inconsistent.
    """

    instructor_percent: Decimal

    def __post_init__(self) -> None:
        if not MIN_REVENUE_PERCENTAGE <= self.instructor_percent <= MAX_REVENUE_PERCENTAGE:
            raise ValueError(
                f"Instructor percentage must be within [0, 100], got {self.instructor_percent}"
            )

    @property
    def platform_percent(self) -> Decimal:
        return HUNDRED - self.instructor_percent


@dataclass(frozen=True)
class RevenueSplit:
    platform_share: Decimal
    creator_share: Decimal

    def share_for(self, view: AttributionView) -> Decimal:
        if view == AttributionView.PLATFORM:
            return self.platform_share
        return self.creator_share


def split_for_instructor(gross: Decimal, percentage: AttributionPercentage) -> RevenueSplit:
    """Split revenue that belongs entirely to independent-instructor courses."""
    return RevenueSplit(
        platform_share=round_money(gross * percentage.platform_percent / HUNDRED),
        creator_share=round_money(gross * percentage.instructor_percent / HUNDRED),
    )


def split_for_platform(
    staff_gross: Decimal,
    instructor_gross: Decimal,
    percentage: AttributionPercentage,
) -> RevenueSplit:
    """Split mixed revenue: staff courses go wholly to the platform."""
    instructor_split = split_for_instructor(instructor_gross, percentage)
    return RevenueSplit(
        platform_share=instructor_split.platform_share + round_money(staff_gross),
        creator_share=instructor_split.creator_share,
    )


def attribute_buckets(
    buckets: Sequence[RevenueBucket],
    percentage: AttributionPercentage,
) -> list[RevenueBucket]:
    """Return copies of ``buckets`` with their shares filled in.

    The split is role-aware in every view, so an instructor view scoped to a
    staff-owned course still credits nothing to the creator.
    """
    attributed = []
    for bucket in buckets:
        split = split_for_platform(bucket.staff_gross, bucket.instructor_gross, percentage)
        attributed.append(
            replace(
                bucket,
                platform_share=split.platform_share,
                creator_share=split.creator_share,
            )
        )
    return attributed


def attribute_totals(totals: RangeTotals, percentage: AttributionPercentage) -> RevenueSplit:
    """Split the whole range at once.

    Splitting the range-wide sums instead of adding up per-bucket shares
    keeps bucket rounding out of the report total.
    """
    return split_for_platform(totals.staff_gross, totals.instructor_gross, percentage)
