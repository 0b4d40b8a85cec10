"""
visits/dates.py

Visit timestamp normalization and ISO-8601 week arithmetic.

Spreadsheet exports carry visit times in several shapes:

    45981.5                 numeric Excel serial (days since 1899-12-30)
    "2025.11.20 14:30"      dot-separated date parts
    "2025.12.2 10：00"      full-width colon, non-padded day
    datetime(2025, 11, 20)  cell already decoded by the reader

All of them are reduced to a naive ``datetime``. Values carrying a UTC offset
are converted to UTC first, so week and day scoping always happen in UTC
calendar terms; naive values are taken as already being UTC.
"""

from __future__ import annotations

import math
import numbers
from datetime import date, datetime, timedelta, timezone
from typing import Any, NamedTuple

# Days between the spreadsheet epoch (1899-12-30) and 1970-01-01.
EXCEL_EPOCH_OFFSET_DAYS = 25569

_UNIX_EPOCH = datetime(1970, 1, 1)

VISIT_TIME_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
)


class IsoWeek(NamedTuple):
    """ISO year (Thursday-shifted) and week number 1..53."""

    year: int
    week: int


def parse_visit_date(value: Any) -> datetime | None:
    """
    Normalize one visit timestamp cell into a naive ``datetime``.

    Returns ``None`` for empty or unparseable values; callers exclude such
    rows from date-scoped aggregation instead of failing.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _as_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, numbers.Real):
        return _from_serial(float(value))

    cleaned = str(value).replace("：", ":").replace(".", "-").strip()
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"
    if not cleaned:
        return None

    try:
        return _as_naive_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    for fmt in VISIT_TIME_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _from_serial(serial: float) -> datetime | None:
    if not math.isfinite(serial) or serial == 0:
        return None
    milliseconds = round((serial - EXCEL_EPOCH_OFFSET_DAYS) * 86_400_000)
    try:
        return _UNIX_EPOCH + timedelta(milliseconds=milliseconds)
    except OverflowError:
        return None


def iso_week(value: date) -> IsoWeek:
    """
    Return the ISO-8601 ``(year, week)`` of *value*.

    The date is shifted to the Thursday of its own week; the year of that
    Thursday is the ISO year and its ordinal day gives the week number.
    """

    day = date(value.year, value.month, value.day)
    thursday = day + timedelta(days=4 - day.isoweekday())
    year_start = date(thursday.year, 1, 1)
    week = math.ceil(((thursday - year_start).days + 1) / 7)
    return IsoWeek(year=thursday.year, week=week)


def week_label(week: IsoWeek) -> str:
    """Format a week as shown on the dashboard, e.g. ``2025年第2周``."""
    return f"{week.year}年第{week.week}周"


def week_range_label(value: date) -> str:
    """Monday-to-Sunday span of the week containing *value*."""
    day = date(value.year, value.month, value.day)
    monday = day - timedelta(days=day.isoweekday() - 1)
    sunday = monday + timedelta(days=6)
    return f"{_format_cn_date(monday)} 到 {_format_cn_date(sunday)}"


def _format_cn_date(value: date) -> str:
    return f"{value.year}年-{value.month:02d}月-{value.day:02d}日"
