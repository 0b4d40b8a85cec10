"""
visits/rows.py

Canonical visit-row extraction from loosely keyed spreadsheet records.

The visit sheet has a merged title cell ("业主拜访记录表") above the real
header row. Spreadsheet readers therefore key the data under the title for
the first column and under positional placeholders for the rest:

    SheetJS style   __EMPTY, __EMPTY_1, ... __EMPTY_15
    pandas style    Unnamed: 1, Unnamed: 2, ... Unnamed: 16

Each canonical field resolves an ordered candidate key list once per row:
the named header (拜访时间, 楼栋...) first, then the positional placeholders.
The first non-blank candidate wins, then the field default applies.
"""

from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

TITLE_COLUMN = "业主拜访记录表"
HEADER_SENTINEL = "序号"

UNKNOWN_BUILDING = "未知"
UNRECORDED_ATTITUDE = "未记录"

_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class VisitRow:
    """
    One normalized visit record.

    ``visited_at`` keeps the raw cell value; it is parsed lazily by the
    aggregator so an unparseable time only affects date-scoped figures.
    """

    sequence_id: int | float | str = ""
    visited_at: Any = ""
    visit_group: str = ""
    visitee: str = ""
    relationship: str = ""
    phone: str = ""
    attitude: str = UNRECORDED_ATTITUDE
    feedback: str = ""
    feedback_follow_up: str = ""
    owner_profile: str = ""
    pending_action: str = ""
    standard_script: str = ""
    building: str = UNKNOWN_BUILDING
    room: str = ""
    area: float = 0.0
    owner_name: str = ""
    remarks: str = ""


@dataclass(frozen=True)
class FieldSpec:
    """Where one canonical field lives in a raw record."""

    attribute: str
    header: str
    column: int
    default: Any = ""

    @property
    def candidates(self) -> tuple[str, ...]:
        if self.column == 0:
            return (self.header, TITLE_COLUMN)
        sheetjs = "__EMPTY" if self.column == 1 else f"__EMPTY_{self.column - 1}"
        return (self.header, sheetjs, f"Unnamed: {self.column}")


FIELD_SPECS: tuple[FieldSpec, ...] = (
    FieldSpec("sequence_id", "序号", 0),
    FieldSpec("visited_at", "拜访时间", 1),
    FieldSpec("visit_group", "拜访组", 2),
    FieldSpec("visitee", "被拜访人", 3),
    FieldSpec("relationship", "被拜访人与业主关系", 4),
    FieldSpec("phone", "被拜访人联系电话", 5),
    FieldSpec("attitude", "业主态度群诉态度", 6, UNRECORDED_ATTITUDE),
    FieldSpec("feedback", "反馈内容（含表扬）", 7),
    FieldSpec("feedback_follow_up", "反馈内容跟进", 8),
    FieldSpec("owner_profile", "业主画像描述", 9),
    FieldSpec("pending_action", "待跟进专项", 10),
    FieldSpec("standard_script", "对客统一话术", 11),
    FieldSpec("building", "楼栋", 12, UNKNOWN_BUILDING),
    FieldSpec("room", "房号", 13),
    FieldSpec("area", "面积", 14, 0.0),
    FieldSpec("owner_name", "业主姓名", 15),
    FieldSpec("remarks", "备注", 16),
)

# Fields whose raw scalar is passed through instead of rendered as text.
_RAW_FIELDS = {"sequence_id", "visited_at"}


def normalize_row(record: Mapping[Any, Any]) -> VisitRow:
    """
    Resolve one raw record into a fixed-shape :class:`VisitRow`.

    Never raises for missing or malformed cells; defaults are substituted.
    """

    lookup = _strip_keys(record)
    values: dict[str, Any] = {}
    for spec in FIELD_SPECS:
        raw = _first_present(lookup, spec.candidates)
        if spec.attribute == "area":
            values["area"] = parse_area(raw)
        elif raw is None:
            values[spec.attribute] = spec.default
        elif spec.attribute in _RAW_FIELDS:
            values[spec.attribute] = raw
        else:
            values[spec.attribute] = _to_text(raw)
    return VisitRow(**values)


def normalize_rows(records: Iterable[Mapping[Any, Any]]) -> list[VisitRow]:
    """Normalize records in order."""
    return [normalize_row(record) for record in records]


def is_header_repeat(record: Mapping[Any, Any]) -> bool:
    """True for the row that repeats the column titles (id cell == "序号")."""
    lookup = _strip_keys(record)
    value = lookup.get(TITLE_COLUMN)
    return value is not None and str(value).strip() == HEADER_SENTINEL


def parse_area(value: Any) -> float:
    """
    Parse a floor-area cell, reading the leading number like ``"88.5㎡"``.

    Absent, non-numeric, non-finite and negative values all yield ``0.0``.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Real):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        if match is None:
            return 0.0
        number = float(match.group(1))
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _strip_keys(record: Mapping[Any, Any]) -> dict[str, Any]:
    return {str(key).strip(): value for key, value in record.items()}


def _first_present(lookup: Mapping[str, Any], candidates: tuple[str, ...]) -> Any:
    for key in candidates:
        value = lookup.get(key)
        if not _is_blank(value):
            return value
    return None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def _to_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
