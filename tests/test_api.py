"""API endpoint tests."""
import pytest
import pytest_asyncio
from datetime import datetime, timezone
from httpx import AsyncClient, ASGITransport
from unittest.mock import AsyncMock, MagicMock

from api.main import app
from api.routes.jobs import get_checker
from database.connection import get_db
from database.repositories.job_repo import JobStatus
from monitor.checker import CycleResult


@pytest.fixture
def checker():
    """Checker double returned by the dependency override."""
    mock = MagicMock()
    mock.run_check_cycle = AsyncMock()
    return mock


@pytest_asyncio.fixture
async def client(mock_mongo_db, checker):
    """HTTP client against the app with database and checker overridden."""
    app.dependency_overrides[get_db] = lambda: mock_mongo_db
    app.dependency_overrides[get_checker] = lambda: checker
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class TestLiveness:
    """Tests for liveness endpoints."""

    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.text == "Hello from message-monitor :)"

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json() == {"status": "healthy"}


class TestJobStatusEndpoint:
    """Tests for GET /jobs/{job_id}/status endpoint."""

    @pytest.mark.asyncio
    async def test_get_status_nonexistent_job(self, client):
        response = await client.get("/jobs/job_missing/status")

        assert response.status_code == 404
        assert "job_missing" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_get_status_successful_job(self, client, mock_mongo_db, sample_job, sample_task):
        mock_mongo_db.jobs.find_one.return_value = sample_job
        mock_mongo_db.tasks.find_one.return_value = sample_task

        response = await client.get("/jobs/job_test123/status")

        assert response.status_code == 200
        body = response.json()
        assert body["job_id"] == "job_test123"
        assert body["status"] == "SUCCESS"
        assert body["task_id"] == "task_test456"
        assert body["task_status"] == "SUCCESS"
        assert body["error"] is None

    @pytest.mark.asyncio
    async def test_get_status_failed_job_includes_error(self, client, mock_mongo_db, sample_job, sample_task):
        sample_job.update(status="FAILED", error_id="err_test789")
        sample_task["status"] = "FAILED"
        mock_mongo_db.jobs.find_one.return_value = sample_job
        mock_mongo_db.tasks.find_one.return_value = sample_task
        mock_mongo_db.errors.find_one.return_value = {
            "_id": "err_test789",
            "job_id": "job_test123",
            "message": "ConnectionError: store unreachable",
            "created_at": datetime(2024, 2, 5, 11, 0, 1, tzinfo=timezone.utc)
        }

        response = await client.get("/jobs/job_test123/status")

        body = response.json()
        assert body["status"] == "FAILED"
        assert body["task_status"] == "FAILED"
        assert body["error"] == "ConnectionError: store unreachable"


class TestListJobsEndpoint:
    """Tests for GET /jobs/ endpoint."""

    @pytest.mark.asyncio
    async def test_list_jobs(self, client, mock_mongo_db, sample_job, sample_task):
        cursor = MagicMock()
        cursor.to_list = AsyncMock(return_value=[sample_job])
        mock_mongo_db.jobs.find.return_value.sort.return_value.skip.return_value.limit.return_value = cursor
        mock_mongo_db.tasks.find_one.return_value = sample_task

        response = await client.get("/jobs/", params={"status_filter": "SUCCESS"})

        assert response.status_code == 200
        assert [job["job_id"] for job in response.json()] == ["job_test123"]


class TestTriggerCheckEndpoint:
    """Tests for POST /jobs/check endpoint."""

    @pytest.mark.asyncio
    async def test_trigger_check(self, client, checker):
        checker.run_check_cycle.return_value = CycleResult(
            job_id="job_1",
            task_id="task_1",
            status=JobStatus.SUCCESS,
            counts={"incoming": 0, "outgoing": 4},
            warned=True
        )

        response = await client.post("/jobs/check")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["warned"] is True
        assert body["counts"] == {"incoming": 0, "outgoing": 4}

    @pytest.mark.asyncio
    async def test_trigger_check_failed_cycle(self, client, checker):
        checker.run_check_cycle.return_value = CycleResult(
            job_id="job_1",
            task_id="task_1",
            status=JobStatus.FAILED,
            error="RuntimeError: boom"
        )

        response = await client.post("/jobs/check")

        body = response.json()
        assert body["status"] == "FAILED"
        assert body["success"] is False
        assert body["error"] == "RuntimeError: boom"

    @pytest.mark.asyncio
    async def test_trigger_check_creation_fault(self, client, checker):
        """Test a fault before the cycle starts surfaces as a 500."""
        checker.run_check_cycle.side_effect = RuntimeError("insert failed")

        response = await client.post("/jobs/check")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "detail": "insert failed"}
