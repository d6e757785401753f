"""Pytest configuration and fixtures."""
import pytest
from datetime import datetime, timezone
from zoneinfo import ZoneInfo
from unittest.mock import MagicMock, AsyncMock

from database.repositories.message_repo import NoFilter, BySender, ByRecipient
from monitor.checker import MessageChecker
from monitor.decision import CheckMode

BRUSSELS = ZoneInfo("Europe/Brussels")
COUNTERPARTY = "org-central-office"


@pytest.fixture
def mock_mongo_db():
    """Create mock MongoDB database."""
    db = MagicMock()

    for name in ("jobs", "tasks", "errors", "messages", "emails"):
        collection = getattr(db, name)
        collection.find_one = AsyncMock(return_value=None)
        collection.insert_one = AsyncMock()
        collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1))
        collection.count_documents = AsyncMock(return_value=0)
        collection.find = MagicMock()

    return db


@pytest.fixture
def mock_redis_client():
    """Create mock Redis client."""
    redis = AsyncMock()
    redis.publish = AsyncMock(return_value=1)
    return redis


@pytest.fixture
def sample_job():
    """Create sample job data."""
    return {
        "_id": "job_test123",
        "status": "SUCCESS",
        "operation": "check-messages",
        "creator": "message-monitor",
        "error_id": None,
        "created_at": datetime(2024, 2, 5, 11, 0, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 2, 5, 11, 0, 2, tzinfo=timezone.utc)
    }


@pytest.fixture
def sample_task():
    """Create sample task data."""
    return {
        "_id": "task_test456",
        "job_id": "job_test123",
        "index": 0,
        "status": "SUCCESS",
        "operation": "check-messages",
        "created_at": datetime(2024, 2, 5, 11, 0, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 2, 5, 11, 0, 2, tzinfo=timezone.utc)
    }


@pytest.fixture
def ledger_events():
    """Ordered record of status writes and error records."""
    return []


@pytest.fixture
def job_repo(ledger_events):
    """Job repository double recording its writes."""
    repo = MagicMock()
    repo.create_job = AsyncMock(return_value={"_id": "job_test123", "status": "SCHEDULED"})

    def update_job_status(job_id, status):
        ledger_events.append(("job", job_id, status))
        return True

    def add_error(job_id, message):
        ledger_events.append(("error", job_id, message))
        return {"_id": "err_test789", "job_id": job_id, "message": message}

    repo.update_job_status = AsyncMock(side_effect=update_job_status)
    repo.add_error = AsyncMock(side_effect=add_error)
    return repo


@pytest.fixture
def task_repo(ledger_events):
    """Task repository double recording its writes."""
    repo = MagicMock()
    repo.create_task = AsyncMock(
        side_effect=lambda job_id: {"_id": "task_test456", "job_id": job_id, "status": "SCHEDULED"}
    )

    def update_task_status(task_id, status):
        ledger_events.append(("task", task_id, status))
        return True

    repo.update_task_status = AsyncMock(side_effect=update_task_status)
    return repo


@pytest.fixture
def message_counts():
    """Counts returned by the message repository double, keyed by direction."""
    return {"total": 4, "incoming": 3, "outgoing": 2}


@pytest.fixture
def message_repo(message_counts):
    """Message repository double answering from message_counts."""
    repo = MagicMock()

    def count_messages_since(window_start, message_filter):
        if isinstance(message_filter, ByRecipient):
            return message_counts["incoming"]
        if isinstance(message_filter, BySender):
            return message_counts["outgoing"]
        assert isinstance(message_filter, NoFilter)
        return message_counts["total"]

    repo.count_messages_since = AsyncMock(side_effect=count_messages_since)
    return repo


@pytest.fixture
def notifier():
    """Warning notifier double."""
    mock = MagicMock()
    mock.create_warning = AsyncMock(return_value={"_id": "email_test001"})
    return mock


@pytest.fixture
def fixed_now():
    """A weekday afternoon in Brussels."""
    return datetime(2024, 2, 5, 14, 30, tzinfo=BRUSSELS)


@pytest.fixture
def make_checker(job_repo, task_repo, message_repo, notifier, fixed_now):
    """Factory for checkers wired to the repository doubles."""
    def _make(mode=CheckMode.BIDIRECTIONAL, counterparty=COUNTERPARTY, clock=None, publisher=None):
        return MessageChecker(
            job_repo=job_repo,
            task_repo=task_repo,
            message_repo=message_repo,
            notifier=notifier,
            mode=mode,
            counterparty=counterparty,
            clock=clock or (lambda: fixed_now),
            publisher=publisher
        )
    return _make
