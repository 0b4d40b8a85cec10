"""
app/services/metrics_service.py

Service layer for visit metrics workflows.

Pipeline per upload:

    1. SpreadsheetDecoder.decode()   bytes -> raw records (first sheet)
    2. visits.rows.normalize_rows()  raw records -> VisitRow
    3. visits.aggregator.*           VisitRow -> summaries

Decoding is the only step that can fail the whole request. Row-level
anomalies are absorbed by the engine (unparseable dates, missing areas).
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date
from functools import lru_cache
from typing import Sequence

from app.config import get_visit_metrics_settings
from app.logging_utils import log_event
from app.services.spreadsheet_service import SpreadsheetDecoder
from visits.aggregator import (
    calculate_attitude_stats,
    calculate_daily_metrics,
    calculate_metrics,
    calculate_weekly_metrics,
)
from visits.rows import VisitRow, normalize_rows
from visits.types import AttitudeStats, DailyStats, MetricSummary, WeeklyStats

logger = logging.getLogger(__name__)

EMPTY_SHEET_MESSAGE = "表格为空或格式不正确"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class EmptyVisitSheetError(ValueError):
    """
    Raised when a decoded spreadsheet holds no visit rows.
    """

    def __init__(self, message: str = EMPTY_SHEET_MESSAGE) -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class VisitMetricsService:
    """
    Coordinates spreadsheet decoding, row normalization and metric folds.

    Holds only configuration; every call recomputes from the rows given.
    """

    def __init__(
        self,
        *,
        total_target: int,
        total_area_target: float,
        feedback_digest_limit: int = 100,
        decoder: SpreadsheetDecoder | None = None,
    ) -> None:
        self._total_target = total_target
        self._total_area_target = total_area_target
        self._feedback_digest_limit = max(1, feedback_digest_limit)
        self._decoder = decoder or SpreadsheetDecoder()

    def load_rows(self, data: bytes, *, filename: str | None = None) -> list[VisitRow]:
        """
        Decode and normalize one uploaded workbook.

        Raises
        ------
        SpreadsheetDecodeError
            The workbook could not be read.
        EmptyVisitSheetError
            The workbook was readable but held no rows.
        """

        records = self._decoder.decode(data, filename=filename)
        rows = normalize_rows(records)
        if not rows:
            log_event(logger, logging.WARNING, "visit_sheet_empty", filename=filename)
            raise EmptyVisitSheetError()
        return rows

    def summarize(
        self,
        rows: Sequence[VisitRow],
        *,
        target_date: date | None = None,
        today: date | None = None,
    ) -> MetricSummary:
        """
        Full dashboard summary.

        When *target_date* is given the weekly block is re-scoped to its
        week; cumulative figures are unaffected.
        """

        summary = calculate_metrics(
            rows,
            total_target=self._total_target,
            total_area_target=self._total_area_target,
            today=today,
        )
        if target_date is not None:
            summary = replace_weekly(summary, self.weekly(rows, target_date))

        log_event(
            logger,
            logging.INFO,
            "visit_metrics_computed",
            rows=summary.cumulative.total,
            week=summary.weekly.week_label,
            weekly_total=summary.weekly.total,
            feedback_total=summary.feedback_stats.total,
            feedback_pending=summary.feedback_stats.pending,
        )
        return summary

    def weekly(self, rows: Sequence[VisitRow], target_date: date) -> WeeklyStats:
        return calculate_weekly_metrics(rows, target_date, total_target=self._total_target)

    def daily(self, rows: Sequence[VisitRow], target_date: date) -> DailyStats:
        return calculate_daily_metrics(rows, target_date)

    def attitudes(self, rows: Sequence[VisitRow]) -> AttitudeStats:
        return calculate_attitude_stats(rows)

    def feedback_digest(self, rows: Sequence[VisitRow], limit: int | None = None) -> list[str]:
        """
        One line per row that carries feedback or a pending action.

        This is the text an external summarizer consumes. Phone numbers,
        rooms and names are left out.
        """

        cap = self._feedback_digest_limit if limit is None else max(0, limit)
        lines = [
            f"反馈: {row.feedback}, 跟进: {row.feedback_follow_up}, "
            f"待办: {row.pending_action}, 态度: {row.attitude}"
            for row in rows
            if row.feedback.strip() or row.pending_action.strip()
        ]
        return lines[:cap]


def replace_weekly(summary: MetricSummary, weekly: WeeklyStats) -> MetricSummary:
    """Return *summary* with its weekly block swapped for *weekly*."""
    return dataclasses.replace(summary, weekly=weekly)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_visit_metrics_service() -> VisitMetricsService:
    """
    Build and cache the metrics service with env-driven settings.
    """
    settings = get_visit_metrics_settings()
    return VisitMetricsService(
        total_target=settings.total_target,
        total_area_target=settings.total_area_target,
        feedback_digest_limit=settings.feedback_digest_limit,
    )
