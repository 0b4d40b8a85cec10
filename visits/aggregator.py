"""
visits/aggregator.py

Deterministic visit metrics engine.

Every function here is a pure fold over normalized :class:`VisitRow`
values: no I/O, no shared state, and no per-row failure can abort a run.
Unparseable visit times only drop a row from date-scoped figures and a
missing area counts as zero.

Rounding
--------
Percentages are ``value / denominator * 100`` rounded half-up to one
decimal; areas are rounded half-up to two decimals before any percentage
is derived from them. Rounding works on the exact binary value of the
float, so ``1.005`` stays ``1.0`` at two decimals.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from visits.categorizer import (
    AttitudeCategory,
    BuildingCategory,
    FeedbackStatus,
    categorize_attitude,
    categorize_building,
    feedback_status,
)
from visits.dates import IsoWeek, iso_week, parse_visit_date, week_label, week_range_label
from visits.rows import UNRECORDED_ATTITUDE, VisitRow
from visits.types import (
    DEFAULT_TOTAL_AREA_TARGET,
    DEFAULT_TOTAL_TARGET,
    AreaStat,
    AttitudeStats,
    BuildingBreakdown,
    CumulativeStats,
    DailyStats,
    FeedbackItem,
    FeedbackStats,
    MetricSummary,
    WeeklyStats,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def calculate_metrics(
    rows: Sequence[VisitRow],
    *,
    total_target: int = DEFAULT_TOTAL_TARGET,
    total_area_target: float = DEFAULT_TOTAL_AREA_TARGET,
    today: date | None = None,
) -> MetricSummary:
    """
    Fold *rows* into the full dashboard summary.

    The weekly window is the ISO week of the latest parseable visit time;
    when no visit time parses it falls back to *today* (the current date
    when omitted).

    Parameters
    ----------
    rows:
        Normalized visit rows. An empty sequence is not rejected here.
    total_target:
        Household denominator for both cumulative and weekly percentages.
    total_area_target:
        Area denominator for ``area_stats`` percentages.
    today:
        Fallback anchor date.

    Returns
    -------
    MetricSummary
    """

    visit_times = [parse_visit_date(row.visited_at) for row in rows]
    anchor = _latest(visit_times)
    if anchor is None:
        anchor = today if today is not None else datetime.now()
    target = iso_week(anchor)

    cumulative = _BuildingTally()
    weekly = _BuildingTally()
    feedback = _FeedbackTally()
    area_by_attitude: dict[str, float] = {}

    for row, visited in zip(rows, visit_times):
        building = categorize_building(row.building)
        cumulative.add(building, row.area)
        if visited is not None and iso_week(visited) == target:
            weekly.add(building, row.area)

        attitude = row.attitude or UNRECORDED_ATTITUDE
        area_by_attitude[attitude] = area_by_attitude.get(attitude, 0.0) + row.area

        feedback.add(row, building)

    summary = MetricSummary(
        total_target=total_target,
        total_area_target=total_area_target,
        cumulative=CumulativeStats(
            total=cumulative.total,
            percentage=percentage(cumulative.total, total_target),
            breakdown=cumulative.breakdown(),
            area_breakdown=cumulative.area_breakdown(),
        ),
        weekly=_weekly_stats(weekly, target, anchor, total_target),
        area_stats=_area_stats(area_by_attitude, total_area_target),
        feedback_stats=feedback.stats(),
    )
    logger.debug(
        "calculate_metrics rows=%d week=%s weekly_total=%d feedback=%d",
        len(rows),
        summary.weekly.week_label,
        summary.weekly.total,
        summary.feedback_stats.total,
    )
    return summary


def calculate_weekly_metrics(
    rows: Sequence[VisitRow],
    target_date: date,
    *,
    total_target: int = DEFAULT_TOTAL_TARGET,
) -> WeeklyStats:
    """
    Recompute only the weekly block for the ISO week containing *target_date*.

    The result equals ``calculate_metrics(...).weekly`` whenever
    *target_date* lies in the week that call anchored on.
    """

    target = iso_week(target_date)
    tally = _BuildingTally()
    for row in rows:
        visited = parse_visit_date(row.visited_at)
        if visited is not None and iso_week(visited) == target:
            tally.add(categorize_building(row.building), row.area)
    return _weekly_stats(tally, target, target_date, total_target)


def calculate_daily_metrics(rows: Sequence[VisitRow], target_date: date) -> DailyStats:
    """Visits recorded on the calendar day of *target_date*."""
    day = date(target_date.year, target_date.month, target_date.day)
    tally = _BuildingTally()
    for row in rows:
        visited = parse_visit_date(row.visited_at)
        if visited is not None and visited.date() == day:
            tally.add(categorize_building(row.building), row.area)
    return DailyStats(date=day.isoformat(), total=tally.total, breakdown=tally.breakdown())


def calculate_attitude_stats(rows: Sequence[VisitRow]) -> AttitudeStats:
    """
    Count support / not-support attitudes.

    Rows with an empty attitude, or one matching neither category, only
    count towards ``total_count``.
    """

    support = 0
    not_support = 0
    for row in rows:
        category = categorize_attitude(row.attitude)
        if category == AttitudeCategory.NOT_SUPPORT:
            not_support += 1
        elif category == AttitudeCategory.SUPPORT:
            support += 1

    total = len(rows)
    return AttitudeStats(
        support_count=support,
        not_support_count=not_support,
        total_count=total,
        support_pct=percentage(support, total),
        not_support_pct=percentage(not_support, total),
    )


def percentage(value: float, denominator: float) -> float:
    """``value / denominator * 100`` to one decimal; 0.0 for a zero denominator."""
    if not denominator:
        return 0.0
    return round_half_up(value / denominator * 100, 1)


def round_half_up(value: float, places: int) -> float:
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Accumulators
# ---------------------------------------------------------------------------


class _BuildingTally:
    """Row count plus per-building count and area for one scope."""

    def __init__(self) -> None:
        self.total = 0
        self._counts = {BuildingCategory.A: 0, BuildingCategory.C: 0, BuildingCategory.COMMERCIAL: 0}
        self._areas = {BuildingCategory.A: 0.0, BuildingCategory.C: 0.0, BuildingCategory.COMMERCIAL: 0.0}

    def add(self, building: str, area: float) -> None:
        self.total += 1
        if building in self._counts:
            self._counts[building] += 1
            self._areas[building] += area

    def breakdown(self) -> BuildingBreakdown:
        return BuildingBreakdown(
            a=self._counts[BuildingCategory.A],
            c=self._counts[BuildingCategory.C],
            commercial=self._counts[BuildingCategory.COMMERCIAL],
        )

    def area_breakdown(self) -> BuildingBreakdown:
        return BuildingBreakdown(
            a=round_half_up(self._areas[BuildingCategory.A], 2),
            c=round_half_up(self._areas[BuildingCategory.C], 2),
            commercial=round_half_up(self._areas[BuildingCategory.COMMERCIAL], 2),
        )


class _FeedbackTally:
    def __init__(self) -> None:
        self.completed = 0
        self.pending = 0
        self.items: list[FeedbackItem] = []

    def add(self, row: VisitRow, building: str) -> None:
        if not row.feedback.strip():
            return
        status = feedback_status(row.feedback_follow_up)
        if status == FeedbackStatus.COMPLETED:
            self.completed += 1
        else:
            self.pending += 1
        self.items.append(
            FeedbackItem(
                id=row.sequence_id,
                content=row.feedback,
                follow_up=row.feedback_follow_up,
                status=status,
                building=building,
                room=row.room,
            )
        )

    def stats(self) -> FeedbackStats:
        return FeedbackStats(
            total=len(self.items),
            completed=self.completed,
            pending=self.pending,
            items=tuple(self.items),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _latest(values: Sequence[datetime | None]) -> datetime | None:
    return max((value for value in values if value is not None), default=None)


def _weekly_stats(
    tally: _BuildingTally,
    target: IsoWeek,
    anchor: date,
    total_target: int,
) -> WeeklyStats:
    return WeeklyStats(
        total=tally.total,
        percentage=percentage(tally.total, total_target),
        breakdown=tally.breakdown(),
        area_breakdown=tally.area_breakdown(),
        iso_year=target.year,
        iso_week=target.week,
        week_label=week_label(target),
        week_range_label=week_range_label(anchor),
    )


def _area_stats(area_by_attitude: dict[str, float], total_area_target: float) -> tuple[AreaStat, ...]:
    stats = []
    for category, area in area_by_attitude.items():
        rounded = round_half_up(area, 2)
        stats.append(
            AreaStat(
                category=category,
                area=rounded,
                percentage=percentage(rounded, total_area_target),
            )
        )
    # sorted() is stable with reverse=True, so ties keep first-seen order.
    return tuple(sorted(stats, key=lambda stat: stat.area, reverse=True))
