"""
visits/types.py

Immutable result structures produced by the visit metrics aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from visits.categorizer import BuildingCategory

DEFAULT_TOTAL_TARGET = 456
"""Number of households to visit."""

DEFAULT_TOTAL_AREA_TARGET = 136130.51
"""Total floor area (square metres) across all households."""


@dataclass(frozen=True)
class BuildingBreakdown:
    """
    Per-building figures for the three named building buckets.

    Holds visit counts (ints) or summed floor areas (floats) depending on
    the field it fills. Rows categorized as "其他" are never represented here.
    """

    a: int | float = 0
    c: int | float = 0
    commercial: int | float = 0

    def as_dict(self) -> dict[str, int | float]:
        return {
            BuildingCategory.A: self.a,
            BuildingCategory.C: self.c,
            BuildingCategory.COMMERCIAL: self.commercial,
        }

    def total(self) -> int | float:
        return self.a + self.c + self.commercial


@dataclass(frozen=True)
class CumulativeStats:
    total: int
    percentage: float
    breakdown: BuildingBreakdown
    area_breakdown: BuildingBreakdown


@dataclass(frozen=True)
class WeeklyStats:
    """
    Visits whose date falls in one ISO week.

    ``percentage`` uses the household target as denominator, the same as
    the cumulative figure.
    """

    total: int
    percentage: float
    breakdown: BuildingBreakdown
    area_breakdown: BuildingBreakdown
    iso_year: int
    iso_week: int
    week_label: str
    week_range_label: str


@dataclass(frozen=True)
class DailyStats:
    date: str
    total: int
    breakdown: BuildingBreakdown


@dataclass(frozen=True)
class AreaStat:
    category: str
    area: float
    percentage: float


@dataclass(frozen=True)
class FeedbackItem:
    id: int | float | str
    content: str
    follow_up: str
    status: str
    building: str
    room: str


@dataclass(frozen=True)
class FeedbackStats:
    total: int = 0
    completed: int = 0
    pending: int = 0
    items: tuple[FeedbackItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AttitudeStats:
    support_count: int
    not_support_count: int
    total_count: int
    support_pct: float
    not_support_pct: float


@dataclass(frozen=True)
class MetricSummary:
    """Everything the visit dashboard renders for one spreadsheet."""

    total_target: int
    total_area_target: float
    cumulative: CumulativeStats
    weekly: WeeklyStats
    area_stats: tuple[AreaStat, ...]
    feedback_stats: FeedbackStats
