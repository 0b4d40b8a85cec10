"""
app/schemas/metrics.py

Response schemas for visit metrics endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from visits.types import (
    AreaStat,
    AttitudeStats,
    DailyStats,
    FeedbackStats,
    MetricSummary,
    WeeklyStats,
)


class CumulativeStatsResponse(BaseModel):
    """
    Visits across the whole sheet.
    """

    total: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0)
    breakdown: dict[str, int]
    area_breakdown: dict[str, float]


class WeeklyStatsResponse(CumulativeStatsResponse):
    """
    Visits inside one ISO week.
    """

    iso_year: int
    iso_week: int = Field(..., ge=1, le=53)
    week_label: str
    week_range_label: str


class DailyStatsResponse(BaseModel):
    date: str
    total: int = Field(..., ge=0)
    breakdown: dict[str, int]


class AreaStatResponse(BaseModel):
    category: str
    area: float = Field(..., ge=0)
    percentage: float = Field(..., ge=0)


class FeedbackItemResponse(BaseModel):
    id: int | float | str
    content: str
    follow_up: str
    status: str
    building: str
    room: str


class FeedbackStatsResponse(BaseModel):
    total: int = Field(..., ge=0)
    completed: int = Field(..., ge=0)
    pending: int = Field(..., ge=0)
    items: list[FeedbackItemResponse] = Field(default_factory=list)


class MetricSummaryResponse(BaseModel):
    """
    API response model for the full dashboard summary.
    """

    total_target: int = Field(..., ge=1)
    total_area_target: float = Field(..., gt=0)
    cumulative: CumulativeStatsResponse
    weekly: WeeklyStatsResponse
    area_stats: list[AreaStatResponse] = Field(default_factory=list)
    feedback_stats: FeedbackStatsResponse


class AttitudeStatsResponse(BaseModel):
    support_count: int = Field(..., ge=0)
    not_support_count: int = Field(..., ge=0)
    total_count: int = Field(..., ge=0)
    support_pct: float = Field(..., ge=0)
    not_support_pct: float = Field(..., ge=0)


class FeedbackDigestResponse(BaseModel):
    lines: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Converters
# ---------------------------------------------------------------------------


def weekly_response(weekly: WeeklyStats) -> WeeklyStatsResponse:
    return WeeklyStatsResponse(
        total=weekly.total,
        percentage=weekly.percentage,
        breakdown=weekly.breakdown.as_dict(),
        area_breakdown=weekly.area_breakdown.as_dict(),
        iso_year=weekly.iso_year,
        iso_week=weekly.iso_week,
        week_label=weekly.week_label,
        week_range_label=weekly.week_range_label,
    )


def daily_response(daily: DailyStats) -> DailyStatsResponse:
    return DailyStatsResponse(
        date=daily.date,
        total=daily.total,
        breakdown=daily.breakdown.as_dict(),
    )


def _area_stat_response(stat: AreaStat) -> AreaStatResponse:
    return AreaStatResponse(category=stat.category, area=stat.area, percentage=stat.percentage)


def _feedback_response(stats: FeedbackStats) -> FeedbackStatsResponse:
    return FeedbackStatsResponse(
        total=stats.total,
        completed=stats.completed,
        pending=stats.pending,
        items=[
            FeedbackItemResponse(
                id=item.id,
                content=item.content,
                follow_up=item.follow_up,
                status=item.status,
                building=item.building,
                room=item.room,
            )
            for item in stats.items
        ],
    )


def summary_response(summary: MetricSummary) -> MetricSummaryResponse:
    """
    Convert an engine summary into its API representation.
    """

    return MetricSummaryResponse(
        total_target=summary.total_target,
        total_area_target=summary.total_area_target,
        cumulative=CumulativeStatsResponse(
            total=summary.cumulative.total,
            percentage=summary.cumulative.percentage,
            breakdown=summary.cumulative.breakdown.as_dict(),
            area_breakdown=summary.cumulative.area_breakdown.as_dict(),
        ),
        weekly=weekly_response(summary.weekly),
        area_stats=[_area_stat_response(stat) for stat in summary.area_stats],
        feedback_stats=_feedback_response(summary.feedback_stats),
    )


def attitude_response(stats: AttitudeStats) -> AttitudeStatsResponse:
    return AttitudeStatsResponse(
        support_count=stats.support_count,
        not_support_count=stats.not_support_count,
        total_count=stats.total_count,
        support_pct=stats.support_pct,
        not_support_pct=stats.not_support_pct,
    )
