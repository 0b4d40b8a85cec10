from __future__ import annotations

import io
from typing import Any, Callable, Sequence

import pytest
from openpyxl import Workbook

VISIT_HEADERS: list[str] = [
    "序号",
    "拜访时间",
    "拜访组",
    "被拜访人",
    "被拜访人与业主关系",
    "被拜访人联系电话",
    "业主态度群诉态度",
    "反馈内容（含表扬）",
    "反馈内容跟进",
    "业主画像描述",
    "待跟进专项",
    "对客统一话术",
    "楼栋",
    "房号",
    "面积",
    "业主姓名",
    "备注",
]


def visit_line(
    seq: Any,
    visited_at: Any,
    *,
    attitude: str | None = "支持",
    feedback: str | None = None,
    follow_up: str | None = None,
    pending: str | None = None,
    building: str | None = "A1",
    room: Any = "101",
    area: Any = None,
) -> list[Any]:
    """One sheet row in column order."""
    return [
        seq,
        visited_at,
        "一组",
        "张三",
        "本人",
        "13800000000",
        attitude,
        feedback,
        follow_up,
        None,
        pending,
        None,
        building,
        room,
        area,
        "张三",
        None,
    ]


@pytest.fixture()
def workbook_bytes() -> Callable[..., bytes]:
    """
    Build an .xlsx in memory.

    With ``title=True`` the sheet starts with the merged "业主拜访记录表" title
    row, as the real export does, so the column headers land in the first
    data row.
    """

    def _build(lines: Sequence[Sequence[Any]], *, title: bool = True) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        if title:
            sheet.append(["业主拜访记录表 "] + [None] * (len(VISIT_HEADERS) - 1))
            sheet.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(VISIT_HEADERS))
        sheet.append(VISIT_HEADERS)
        for line in lines:
            sheet.append(list(line))
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _build


@pytest.fixture()
def visit_line_factory() -> Callable[..., list[Any]]:
    return visit_line
