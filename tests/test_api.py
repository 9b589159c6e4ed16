import uuid
from datetime import datetime, timezone
from types import MappingProxyType
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from analyzers.base import ComponentResult
from api.dependencies import get_analysis_service
from db.models import AnalysisRecord, AnalysisStatus
from db.session import get_db_session
from main import app
from pipeline.exceptions import AnalysisFailedError, StoreError
from pipeline.freshness import AnalysisOutcome
from pipeline.metadata import PageMetadata
from pipeline.orchestrator import AnalysisReport

client = TestClient(app)

ANALYSIS_ID = uuid.UUID("6f1c1a52-3a4b-4e4c-9d55-0c7f3c1e9a10")
CREATED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _report(scores: dict[str, int], failed=()) -> AnalysisReport:
    results = {name: ComponentResult(score=score, issues=[f"{name} issue"]) for name, score in scores.items()}
    succeeded = [score for name, score in scores.items() if name not in failed]
    return AnalysisReport(
        url="https://example.com/",
        results=MappingProxyType(results),
        failed_components=tuple(failed),
        overall_score=round(sum(succeeded) / len(succeeded)) if succeeded else 0,
    )


@pytest.fixture
def service():
    mock_service = MagicMock()
    mock_service.analyze = AsyncMock(
        return_value=AnalysisOutcome(
            analysis_id=ANALYSIS_ID,
            from_cache=False,
            report=_report({"speed": 75}),
            message="Analysis completed successfully",
            metadata=PageMetadata("Example Domain", "An example page", "https://example.com/"),
        )
    )
    app.dependency_overrides[get_analysis_service] = lambda: mock_service
    yield mock_service
    app.dependency_overrides.pop(get_analysis_service, None)


class TestAnalyzeEndpoint:
    def test_success(self, service):
        response = client.post(
            "/api/v1/analyze",
            json={"url": "https://example.com", "component": "speed"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["analysisId"] == str(ANALYSIS_ID)
        assert data["fromCache"] is False
        assert "Analysis completed" in data["message"]
        assert data["analysis"]["overallScore"] == 75
        assert data["analysis"]["status"] == "completed"
        assert data["analysis"]["speed"]["score"] == 75
        assert data["metadata"]["title"] == "Example Domain"

        request = service.analyze.await_args.args[0]
        assert request.url == "https://example.com/"
        assert request.components == ("speed",)
        assert request.owner_identity == "anonymous"

    def test_camel_case_body(self, service):
        response = client.post(
            "/api/v1/analyze",
            json={"url": "https://example.com", "email": "me@example.com", "forceRescan": True},
        )

        assert response.status_code == 200
        request = service.analyze.await_args.args[0]
        assert request.force_rescan is True
        assert request.owner_identity == "me@example.com"

    def test_cache_hit(self, service):
        service.analyze.return_value = AnalysisOutcome(
            analysis_id=ANALYSIS_ID,
            from_cache=True,
            report=_report({"speed": 75}),
            message="Analysis retrieved from cache",
        )

        response = client.post("/api/v1/analyze", json={"url": "https://example.com"})

        assert response.status_code == 200
        assert response.json()["fromCache"] is True
        assert response.json()["analysisId"] == str(ANALYSIS_ID)

    def test_missing_url(self, service):
        response = client.post("/api/v1/analyze", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "URL is required"}
        service.analyze.assert_not_called()

    def test_invalid_url(self, service):
        response = client.post("/api/v1/analyze", json={"url": "ftp://example.com"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid URL format")
        service.analyze.assert_not_called()

    def test_unknown_component(self, service):
        response = client.post(
            "/api/v1/analyze",
            json={"url": "https://example.com", "component": "bogus"},
        )

        assert response.status_code == 400
        assert "speed, fonts, images, cta, whitespace, social" in response.json()["error"]
        service.analyze.assert_not_called()

    def test_malformed_body(self, service):
        response = client.post(
            "/api/v1/analyze",
            content="not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "error" in response.json()

    def test_store_failure(self, service):
        service.analyze.side_effect = StoreError("Failed to store analysis")

        response = client.post("/api/v1/analyze", json={"url": "https://example.com"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to store analysis"}

    def test_unexpected_failure(self, service):
        service.analyze.side_effect = AnalysisFailedError(ANALYSIS_ID, "database exploded")

        response = client.post("/api/v1/analyze", json={"url": "https://example.com"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_component_failure_still_succeeds(self, service):
        service.analyze.return_value = AnalysisOutcome(
            analysis_id=ANALYSIS_ID,
            from_cache=False,
            report=_report({"speed": 80, "fonts": 0}, failed=("fonts",)),
            message="Analysis completed successfully",
        )

        response = client.post("/api/v1/analyze", json={"url": "https://example.com"})

        assert response.status_code == 200
        analysis = response.json()["analysis"]
        assert analysis["fonts"]["score"] == 0
        assert analysis["failedComponents"] == ["fonts"]
        assert analysis["overallScore"] == 80


class TestQueueEndpoint:
    def test_queue(self):
        with patch("api.routes.analyze.run_analysis") as task:
            task.delay.return_value.id = "task-123"
            response = client.post(
                "/api/v1/analyze/queue",
                json={"url": "https://example.com", "component": "font", "email": "a@b.co"},
            )

        assert response.status_code == 202
        assert response.json() == {
            "success": True,
            "taskId": "task-123",
            "message": "Analysis queued successfully",
        }
        task.delay.assert_called_once_with("https://example.com/", "a@b.co", "fonts", False)

    def test_queue_validates_first(self):
        with patch("api.routes.analyze.run_analysis") as task:
            response = client.post("/api/v1/analyze/queue", json={"url": "nope"})

        assert response.status_code == 400
        task.delay.assert_not_called()


def _record(**overrides) -> AnalysisRecord:
    values = dict(
        id=ANALYSIS_ID,
        owner_identity="anonymous",
        url="https://www.example.com/",
        status=AnalysisStatus.COMPLETED,
        component_results={
            "speed": {"score": 45, "issues": ["Slow server response"], "recommendations": ["Enable server caching"], "metrics": {}},
            "fonts": {"score": 90, "issues": [], "recommendations": [], "metrics": {}},
        },
        failed_components=[],
        overall_score=68,
        page_title=None,
        page_description=None,
        retry_count=0,
        algorithm_version="1.0.0",
        error_message=None,
        created_at=CREATED,
        completed_at=CREATED,
    )
    values.update(overrides)
    return AnalysisRecord(**values)


@pytest.fixture
def repo():
    async def override_db():
        yield MagicMock()

    app.dependency_overrides[get_db_session] = override_db
    with patch("api.routes.reports.AnalysisRepository") as repo_class:
        yield repo_class.return_value
    app.dependency_overrides.pop(get_db_session, None)


class TestReportsEndpoints:
    def test_list_reports(self, repo):
        repo.list_completed = AsyncMock(return_value=[_record()])
        repo.count_completed = AsyncMock(return_value=3)

        response = client.get("/api/v1/reports?limit=1&offset=1&sortBy=overall_score&sortOrder=asc&minScore=50")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["hasMore"] is True
        assert data["reports"][0]["urlTitle"] == "example.com"
        assert data["reports"][0]["overallScore"] == 68
        repo.list_completed.assert_awaited_once_with(
            limit=1, offset=1, sort_by="overall_score", descending=False, min_score=50
        )

    def test_list_rejects_unknown_sort(self, repo):
        response = client.get("/api/v1/reports?sortBy=url")
        assert response.status_code == 400

    def test_report_detail(self, repo):
        repo.get_by_id = AsyncMock(return_value=_record(page_title="Example"))

        response = client.get(f"/api/v1/reports/{ANALYSIS_ID}")

        assert response.status_code == 200
        data = response.json()
        assert data["urlTitle"] == "Example"
        assert data["verdict"] == "Fair"
        assert data["priority"]["component"] == "speed"
        assert data["priority"]["impactLevel"] == "Critical"
        assert data["components"]["speed"]["pairs"] == [
            {"issue": "Slow server response", "fix": "Enable server caching", "impact": "High"}
        ]
        assert [fix["component"] for fix in data["topFixes"]] == ["speed"]

    def test_report_not_found(self, repo):
        repo.get_by_id = AsyncMock(return_value=None)

        response = client.get(f"/api/v1/reports/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"error": "Analysis not found"}

    def test_unfinished_report_is_not_found(self, repo):
        repo.get_by_id = AsyncMock(return_value=_record(status=AnalysisStatus.PROCESSING))

        response = client.get(f"/api/v1/reports/{ANALYSIS_ID}")

        assert response.status_code == 404

    def test_malformed_id_is_not_found(self, repo):
        response = client.get("/api/v1/reports/not-a-uuid")
        assert response.status_code == 404

    def test_history(self, repo):
        repo.list_history = AsyncMock(
            return_value=[
                _record(id=uuid.uuid4(), overall_score=80),
                _record(id=uuid.uuid4(), status=AnalysisStatus.FAILED, overall_score=None, error_message="boom"),
            ]
        )

        response = client.get("/api/v1/reports/history?url=https://Example.com&email=Me@Example.com")

        assert response.status_code == 200
        data = response.json()
        assert data["url"] == "https://example.com/"
        assert data["owner"] == "me@example.com"
        assert data["count"] == 2
        assert [entry["status"] for entry in data["analyses"]] == ["completed", "failed"]
        repo.list_history.assert_awaited_once_with("me@example.com", "https://example.com/", limit=50)

    def test_history_requires_url(self, repo):
        response = client.get("/api/v1/reports/history")

        assert response.status_code == 400
        assert response.json() == {"error": "URL is required"}


def test_health():
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["algorithmVersion"] == "1.0.0"
