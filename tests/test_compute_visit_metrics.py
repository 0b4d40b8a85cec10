from __future__ import annotations

import json
from pathlib import Path

from scripts.compute_visit_metrics import main


def _write_workbook(tmp_path: Path, data: bytes) -> Path:
    path = tmp_path / "visits.xlsx"
    path.write_bytes(data)
    return path


def test_prints_summary_json(tmp_path, capsys, workbook_bytes, visit_line_factory) -> None:
    path = _write_workbook(
        tmp_path,
        workbook_bytes(
            [
                visit_line_factory(1, "2025-01-06 10:00", building="A1", area=100),
                visit_line_factory(2, "2024-12-02", building="C1", area=20, attitude="不支持"),
            ]
        ),
    )

    assert main([str(path)]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["cumulative"]["total"] == 2
    assert summary["weekly"]["week_label"] == "2025年第2周"
    assert summary["area_stats"][0] == {"category": "支持", "area": 100.0, "percentage": 0.1}


def test_date_flag_rescopes_week(tmp_path, capsys, workbook_bytes, visit_line_factory) -> None:
    path = _write_workbook(
        tmp_path,
        workbook_bytes([visit_line_factory(1, "2024-12-02", building="C1")]),
    )

    assert main([str(path), "--date", "2024-12-05"]) == 0

    weekly = json.loads(capsys.readouterr().out)["weekly"]
    assert weekly["week_label"] == "2024年第49周"
    assert weekly["total"] == 1


def test_attitudes_flag(tmp_path, capsys, workbook_bytes, visit_line_factory) -> None:
    path = _write_workbook(
        tmp_path,
        workbook_bytes([visit_line_factory(1, "2025-01-06"), visit_line_factory(2, "2025-01-06", attitude="不支持")]),
    )

    assert main([str(path), "--attitudes"]) == 0

    stats = json.loads(capsys.readouterr().out)
    assert stats == {
        "support_count": 1,
        "not_support_count": 1,
        "total_count": 2,
        "support_pct": 50.0,
        "not_support_pct": 50.0,
    }


def test_missing_file_fails(tmp_path, capsys) -> None:
    assert main([str(tmp_path / "missing.xlsx")]) == 1
    assert "Cannot read" in capsys.readouterr().err


def test_unreadable_workbook_fails(tmp_path) -> None:
    assert main([str(_write_workbook(tmp_path, b"not a workbook"))]) == 1


def test_empty_sheet_fails(tmp_path, capsys, workbook_bytes) -> None:
    assert main([str(_write_workbook(tmp_path, workbook_bytes([])))]) == 1
    assert "表格为空或格式不正确" in capsys.readouterr().err
