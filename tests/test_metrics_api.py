"""
tests/test_metrics_api.py

HTTP contract of the visit metrics endpoints.
"""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import is_spreadsheet_upload
from app.config import get_upload_settings
from app.main import create_app
from app.services.metrics_service import VisitMetricsService, get_visit_metrics_service

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture()
def client() -> Iterator[TestClient]:
    application = create_app()
    application.dependency_overrides[get_visit_metrics_service] = lambda: VisitMetricsService(
        total_target=456,
        total_area_target=136130.51,
    )
    with TestClient(application) as test_client:
        yield test_client


@pytest.fixture()
def sample_workbook(workbook_bytes, visit_line_factory) -> bytes:
    return workbook_bytes(
        [
            visit_line_factory(1, "2025-01-06 10:00", building="A1", area=100, feedback="漏水", follow_up="已解决"),
            visit_line_factory(2, "2025.01.08 14：30", building="c2", area=80.5, attitude="不支持", feedback="噪音"),
            visit_line_factory(3, "2024-12-31", building="D1", area=70, attitude="中立", pending="门禁维修"),
        ]
    )


def _upload(data: bytes, filename: str = "visits.xlsx", content_type: str = XLSX_CONTENT_TYPE) -> dict:
    return {"file": (filename, data, content_type)}


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestMetricsEndpoint:
    def test_summary(self, client: TestClient, sample_workbook: bytes) -> None:
        response = client.post("/visits/metrics", files=_upload(sample_workbook))

        assert response.status_code == 200
        body = response.json()
        assert body["total_target"] == 456
        assert body["cumulative"]["total"] == 3
        assert body["cumulative"]["breakdown"] == {"A栋": 1, "C栋": 1, "商业": 0}
        assert body["weekly"]["week_label"] == "2025年第2周"
        assert body["weekly"]["week_range_label"] == "2025年-01月-06日 到 2025年-01月-12日"
        assert body["weekly"]["total"] == 2
        assert [stat["category"] for stat in body["area_stats"]] == ["支持", "不支持", "中立"]
        assert body["feedback_stats"]["total"] == 2
        assert body["feedback_stats"]["pending"] == 1
        assert body["feedback_stats"]["items"][1]["building"] == "C栋"

    def test_target_date_rescopes_week(self, client: TestClient, sample_workbook: bytes) -> None:
        response = client.post(
            "/visits/metrics",
            files=_upload(sample_workbook),
            params={"target_date": "2025-01-01"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["weekly"]["week_label"] == "2025年第1周"
        assert body["weekly"]["total"] == 1
        assert body["cumulative"]["total"] == 3

    def test_non_excel_upload_rejected(self, client: TestClient) -> None:
        response = client.post("/visits/metrics", files=_upload(b"a,b\n1,2\n", "visits.csv", "text/csv"))

        assert response.status_code == 400
        assert response.json()["detail"] == "Only Excel files are allowed."

    def test_unreadable_workbook(self, client: TestClient) -> None:
        response = client.post("/visits/metrics", files=_upload(b"not a workbook"))

        assert response.status_code == 400
        assert response.json()["detail"] == "解析Excel失败，请确保文件格式正确 (Excel)。"

    def test_empty_sheet(self, client: TestClient, workbook_bytes) -> None:
        response = client.post("/visits/metrics", files=_upload(workbook_bytes([])))

        assert response.status_code == 422
        assert response.json()["detail"] == "表格为空或格式不正确"

    def test_oversized_upload(
        self, client: TestClient, sample_workbook: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VISIT_MAX_UPLOAD_BYTES", "1024")
        get_upload_settings.cache_clear()
        assert len(sample_workbook) > 1024

        try:
            response = client.post("/visits/metrics", files=_upload(sample_workbook))
        finally:
            get_upload_settings.cache_clear()

        assert response.status_code == 413


class TestScopedEndpoints:
    def test_weekly(self, client: TestClient, sample_workbook: bytes) -> None:
        response = client.post(
            "/visits/weekly",
            files=_upload(sample_workbook),
            params={"target_date": "2025-01-07"},
        )

        assert response.status_code == 200
        body = response.json()
        assert (body["iso_year"], body["iso_week"]) == (2025, 2)
        assert body["area_breakdown"]["A栋"] == 100.0
        assert body["area_breakdown"]["C栋"] == 80.5

    def test_weekly_requires_target_date(self, client: TestClient, sample_workbook: bytes) -> None:
        response = client.post("/visits/weekly", files=_upload(sample_workbook))
        assert response.status_code == 422

    def test_daily(self, client: TestClient, sample_workbook: bytes) -> None:
        response = client.post(
            "/visits/daily",
            files=_upload(sample_workbook),
            params={"target_date": "2025-01-08"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "date": "2025-01-08",
            "total": 1,
            "breakdown": {"A栋": 0, "C栋": 1, "商业": 0},
        }

    def test_attitudes(self, client: TestClient, sample_workbook: bytes) -> None:
        response = client.post("/visits/attitudes", files=_upload(sample_workbook))

        assert response.status_code == 200
        body = response.json()
        assert body["support_count"] == 1
        assert body["not_support_count"] == 1
        assert body["total_count"] == 3
        assert body["support_pct"] == 33.3

    def test_feedback_digest(self, client: TestClient, sample_workbook: bytes) -> None:
        response = client.post("/visits/feedback-digest", files=_upload(sample_workbook), params={"limit": 2})

        assert response.status_code == 200
        assert response.json()["lines"] == [
            "反馈: 漏水, 跟进: 已解决, 待办: , 态度: 支持",
            "反馈: 噪音, 跟进: , 待办: , 态度: 不支持",
        ]


class TestUploadValidation:
    @pytest.mark.parametrize(
        "filename, content_type, expected",
        [
            ("visits.xlsx", None, True),
            ("VISITS.XLS", "application/octet-stream", True),
            ("export", XLSX_CONTENT_TYPE, True),
            ("export", "application/vnd.ms-excel; charset=binary", True),
            ("visits.csv", "text/csv", False),
            ("visits.xlsx.txt", "text/plain", False),
            (None, None, False),
        ],
    )
    def test_is_spreadsheet_upload(self, filename: str | None, content_type: str | None, expected: bool) -> None:
        assert is_spreadsheet_upload(filename, content_type) is expected
