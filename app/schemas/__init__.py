"""
app/schemas package marker.
"""

from app.schemas.metrics import (
    AttitudeStatsResponse,
    DailyStatsResponse,
    FeedbackDigestResponse,
    MetricSummaryResponse,
    WeeklyStatsResponse,
)

__all__ = [
    "AttitudeStatsResponse",
    "DailyStatsResponse",
    "FeedbackDigestResponse",
    "MetricSummaryResponse",
    "WeeklyStatsResponse",
]
