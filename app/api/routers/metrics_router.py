"""
app/api/routers/metrics_router.py

Visit metrics HTTP endpoints.

Every endpoint takes the visit spreadsheet as a multipart upload and
recomputes from scratch; nothing is stored between requests.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status

from app.api.dependencies import get_spreadsheet_upload
from app.config import get_upload_settings
from app.schemas.metrics import (
    AttitudeStatsResponse,
    DailyStatsResponse,
    FeedbackDigestResponse,
    MetricSummaryResponse,
    WeeklyStatsResponse,
    attitude_response,
    daily_response,
    summary_response,
    weekly_response,
)
from app.services.metrics_service import (
    EmptyVisitSheetError,
    VisitMetricsService,
    get_visit_metrics_service,
)
from app.services.spreadsheet_service import SpreadsheetDecodeError
from visits.rows import VisitRow

router = APIRouter(prefix="/visits", tags=["visits"])

PARSE_FAILURE_MESSAGE = "解析Excel失败，请确保文件格式正确 (Excel)。"


@router.post("/metrics", response_model=MetricSummaryResponse)
def upload_metrics(
    file: UploadFile = Depends(get_spreadsheet_upload),
    target_date: date | None = Query(default=None, description="Re-scope the weekly block to this date's ISO week"),
    service: VisitMetricsService = Depends(get_visit_metrics_service),
) -> MetricSummaryResponse:
    """
    Derive the full dashboard summary from one visit spreadsheet.
    """

    rows = _load_rows(file, service)
    return summary_response(service.summarize(rows, target_date=target_date))


@router.post("/weekly", response_model=WeeklyStatsResponse)
def upload_weekly(
    file: UploadFile = Depends(get_spreadsheet_upload),
    target_date: date = Query(..., description="Any date inside the week to report"),
    service: VisitMetricsService = Depends(get_visit_metrics_service),
) -> WeeklyStatsResponse:
    rows = _load_rows(file, service)
    return weekly_response(service.weekly(rows, target_date))


@router.post("/daily", response_model=DailyStatsResponse)
def upload_daily(
    file: UploadFile = Depends(get_spreadsheet_upload),
    target_date: date = Query(..., description="Calendar day to report"),
    service: VisitMetricsService = Depends(get_visit_metrics_service),
) -> DailyStatsResponse:
    rows = _load_rows(file, service)
    return daily_response(service.daily(rows, target_date))


@router.post("/attitudes", response_model=AttitudeStatsResponse)
def upload_attitudes(
    file: UploadFile = Depends(get_spreadsheet_upload),
    service: VisitMetricsService = Depends(get_visit_metrics_service),
) -> AttitudeStatsResponse:
    rows = _load_rows(file, service)
    return attitude_response(service.attitudes(rows))


@router.post("/feedback-digest", response_model=FeedbackDigestResponse)
def upload_feedback_digest(
    file: UploadFile = Depends(get_spreadsheet_upload),
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: VisitMetricsService = Depends(get_visit_metrics_service),
) -> FeedbackDigestResponse:
    """
    Feedback lines in the shape an external summarizer expects.
    """

    rows = _load_rows(file, service)
    return FeedbackDigestResponse(lines=service.feedback_digest(rows, limit=limit))


def _load_rows(file: UploadFile, service: VisitMetricsService) -> list[VisitRow]:
    max_bytes = get_upload_settings().max_upload_bytes
    try:
        data = file.file.read(max_bytes + 1)
    finally:
        file.file.close()

    if len(data) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Spreadsheet exceeds {max_bytes} bytes.",
        )

    try:
        return service.load_rows(data, filename=file.filename)
    except SpreadsheetDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=PARSE_FAILURE_MESSAGE,
        ) from exc
    except EmptyVisitSheetError as exc:
        raise HTTPException(
            status_code=422,
            detail=str(exc),
        ) from exc
