"""Tests for the HTTP surface: health, cycle imports and lifestyle analysis."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch
from uuid import UUID

from cyclesense.analysis.models import DataSource, LifestyleReport
from cyclesense.config import get_settings
from cyclesense.imports.tests.conftest import CLUE_CSV, GENERIC_CSV, UNKNOWN_LAYOUT_CSV
from cyclesense.routers.tests.conftest import TEST_USER_ID


class TestHealth:
    def test_health_without_database(self, client) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "not_configured"


class TestCycleImportParse:
    def _upload(self, client, content: bytes, filename: str = "export.csv", **data):
        return client.post(
            "/api/v1/cycle-imports/parse",
            files={"file": (filename, content, "text/csv")},
            data=data,
        )

    def test_generic_upload(self, client) -> None:
        response = self._upload(client, GENERIC_CSV.encode())
        assert response.status_code == 200
        body = response.json()
        assert body["succeeded"] is True
        assert body["detected_format"] == "generic"
        assert body["rows_valid"] == 2
        assert body["records"] == 2
        assert [e["menstrual_phase"] for e in body["entries"]] == ["menstrual", "ovulation"]

    def test_clue_upload(self, client) -> None:
        body = self._upload(client, CLUE_CSV.encode()).json()
        assert body["detected_format"] == "clue"
        assert body["rows_valid"] == 5

    def test_forced_format(self, client) -> None:
        body = self._upload(client, CLUE_CSV.encode(), forced_format="generic").json()
        assert body["detected_format"] == "generic"

    def test_unknown_forced_format_rejected(self, client) -> None:
        response = self._upload(client, CLUE_CSV.encode(), forced_format="apple")
        assert response.status_code == 400

    def test_unknown_layout_is_reported_not_raised(self, client) -> None:
        response = self._upload(client, UNKNOWN_LAYOUT_CSV.encode())
        assert response.status_code == 200
        body = response.json()
        assert body["succeeded"] is False
        assert body["detected_format"] == "unknown"
        assert "date" in body["error"]

    def test_wrong_extension_rejected(self, client) -> None:
        response = self._upload(client, GENERIC_CSV.encode(), filename="export.xlsx")
        assert response.status_code == 400
        assert "not allowed" in response.json()["detail"]

    def test_oversized_file_rejected(self, client) -> None:
        limit = get_settings().max_import_size_bytes
        response = self._upload(client, b"date,phase\n" + b"x" * limit)
        assert response.status_code == 400
        assert "too large" in response.json()["detail"]


class TestLifestyleAnalysis:
    def test_post_payload(self, client) -> None:
        payload = {
            "episodes": [
                {"start_time": f"2024-03-0{d}T09:00:00", "pain_intensity": 8}
                for d in range(1, 6)
            ],
            "health_records": [
                {"date": f"2024-03-0{d}", "data_type": "sleep", "sleep_quality_score": 30}
                for d in range(1, 6)
            ],
        }
        response = client.post("/api/v1/analysis/lifestyle", json=payload)
        assert response.status_code == 200
        body = response.json()
        assert body["data_source"] == "unified"
        assert body["sleep_correlations"][0]["strength"] == "strong"
        assert body["total_episodes"] == 5
        assert any("sleep hygiene" in r for r in body["recommendations"])

    def test_post_empty_payload(self, client) -> None:
        body = client.post("/api/v1/analysis/lifestyle", json={}).json()
        assert body["data_source"] == "none"
        assert body["has_data"] is False

    def test_post_invalid_pain_rejected(self, client) -> None:
        payload = {"episodes": [{"start_time": "2024-03-01T09:00:00", "pain_intensity": 11}]}
        response = client.post("/api/v1/analysis/lifestyle", json=payload)
        assert response.status_code == 422

    def test_get_requires_user(self, client) -> None:
        assert client.get("/api/v1/analysis/lifestyle").status_code == 401

    def test_get_without_database(self, client, auth_headers) -> None:
        response = client.get("/api/v1/analysis/lifestyle", headers=auth_headers)
        assert response.status_code == 503

    def test_get_with_database(self, client, auth_headers) -> None:
        report = LifestyleReport(data_source=DataSource.HEURISTIC, total_episodes=2)
        with (
            patch("cyclesense.routers.lifestyle.has_pool", return_value=True),
            patch(
                "cyclesense.routers.lifestyle.analyze_user",
                AsyncMock(return_value=report),
            ) as analyze,
        ):
            response = client.get(
                "/api/v1/analysis/lifestyle", params={"days": 30}, headers=auth_headers
            )

        assert response.status_code == 200
        assert response.json()["data_source"] == "heuristic"
        args, kwargs = analyze.await_args
        assert args[1] == UUID(TEST_USER_ID)
        assert kwargs["days"] == 30

    def test_get_rejects_malformed_user_id(self, client) -> None:
        with patch("cyclesense.routers.lifestyle.has_pool", return_value=True):
            response = client.get(
                "/api/v1/analysis/lifestyle", headers={"x-test-user": "not-a-uuid"}
            )
        assert response.status_code == 400
