"""Check cycle that verifies message traffic for the current business day."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional
import redis.asyncio as redis
from motor.motor_asyncio import AsyncIOMotorDatabase

from database.repositories.job_repo import JobRepository, JobStatus
from database.repositories.task_repo import TaskRepository
from database.repositories.message_repo import MessageRepository
from monitor.decision import CheckMode, filters_for_mode, should_warn
from monitor.notifier import WarningNotifier
from monitor.publisher import StatusPublisher
from shared.config import Settings, settings
from shared.utils import get_local_now, start_of_business_day

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS = {
    JobStatus.SCHEDULED: (JobStatus.BUSY, JobStatus.FAILED),
    JobStatus.BUSY: (JobStatus.SUCCESS, JobStatus.FAILED),
    JobStatus.SUCCESS: (),
    JobStatus.FAILED: (),
}


class InvalidTransitionError(Exception):
    """Raised when a status change is not in ALLOWED_TRANSITIONS."""


@dataclass
class CycleResult:
    """Outcome of one check cycle."""
    job_id: str
    task_id: str
    status: str = JobStatus.SCHEDULED
    counts: Dict[str, int] = field(default_factory=dict)
    warned: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == JobStatus.SUCCESS


def describe_error(exc: BaseException) -> str:
    """Turn an exception into the message stored on the error record."""
    message = str(exc)
    if not message:
        return type(exc).__name__
    return f"{type(exc).__name__}: {message}"


class MessageChecker:
    """Runs check cycles and keeps the job/task ledger truthful."""

    def __init__(
        self,
        job_repo: JobRepository,
        task_repo: TaskRepository,
        message_repo: MessageRepository,
        notifier: WarningNotifier,
        mode: CheckMode = CheckMode.BIDIRECTIONAL,
        counterparty: Optional[str] = None,
        business_day_start_hour: int = 8,
        tz_name: str = "Europe/Brussels",
        publisher: Optional[StatusPublisher] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.job_repo = job_repo
        self.task_repo = task_repo
        self.message_repo = message_repo
        self.notifier = notifier
        self.filters = filters_for_mode(mode, counterparty)
        self.business_day_start_hour = business_day_start_hour
        self.tz_name = tz_name
        self.publisher = publisher
        self.clock = clock or (lambda: get_local_now(self.tz_name))

    @classmethod
    def from_settings(
        cls,
        db: AsyncIOMotorDatabase,
        redis_client: Optional[redis.Redis] = None,
        config: Settings = None
    ) -> "MessageChecker":
        """Wire a checker against MongoDB (and optionally Redis) from settings."""
        config = config or settings
        publisher = StatusPublisher(redis_client, config.redis_status_channel) if redis_client else None

        return cls(
            job_repo=JobRepository(db),
            task_repo=TaskRepository(db),
            message_repo=MessageRepository(db),
            notifier=WarningNotifier(db, config.email_from, config.email_to),
            mode=CheckMode(config.check_mode),
            counterparty=config.counterparty_identity,
            business_day_start_hour=config.business_day_start_hour,
            tz_name=config.check_timezone,
            publisher=publisher
        )

    def window_start(self) -> datetime:
        """Start of the current business day, computed fresh on every call."""
        return start_of_business_day(self.clock(), self.business_day_start_hour)

    async def run_check_cycle(self) -> CycleResult:
        """
        Run one check cycle to a terminal status.

        Creating the job or task is not guarded: a failure there propagates
        because nothing has been marked BUSY yet. Any fault after that is
        recorded on the job, both entities end FAILED and the failed result
        is returned instead of raised.
        """
        job = await self.job_repo.create_job()
        task = await self.task_repo.create_task(job["_id"])
        result = CycleResult(job_id=job["_id"], task_id=task["_id"])

        try:
            await self._transition(result, JobStatus.BUSY)

            result.counts = await self._count_messages(self.window_start())

            if should_warn(result.counts):
                logger.info("Not enough message activity today, creating a warning email.")
                await self.notifier.create_warning(result.task_id)
                result.warned = True

            await self._transition(result, JobStatus.SUCCESS)
        except Exception as e:
            logger.error(f"An error occurred when checking messages for job {result.job_id}: {e}")
            await self._fail(result, e)

        return result

    async def _count_messages(self, window_start: datetime) -> Dict[str, int]:
        """Query each configured count in turn."""
        counts = {}
        for name, message_filter in self.filters.items():
            count = await self.message_repo.count_messages_since(window_start, message_filter)
            logger.info(f"Processed {count} {name} messages since {window_start.isoformat()}.")
            counts[name] = count
        return counts

    async def _transition(self, result: CycleResult, status: str):
        """Move job then task to `status`; the result only follows once both are written."""
        if status not in ALLOWED_TRANSITIONS[result.status]:
            raise InvalidTransitionError(
                f"Job {result.job_id} cannot move from {result.status} to {status}"
            )

        await self.job_repo.update_job_status(result.job_id, status)
        await self.task_repo.update_task_status(result.task_id, status)
        result.status = status

        await self._publish(result)

    async def _publish(self, result: CycleResult):
        """Announce the committed status; faults here never touch the cycle."""
        if not self.publisher:
            return
        try:
            await self.publisher.publish_status(result.job_id, result.task_id, result.status)
        except Exception as e:
            logger.warning(f"Could not publish status {result.status} for job {result.job_id}: {e}")

    async def _fail(self, result: CycleResult, exc: Exception):
        """Record the fault and force job and task to FAILED, logging any further fault."""
        if JobStatus.FAILED not in ALLOWED_TRANSITIONS[result.status]:
            logger.error(
                f"Job {result.job_id} already ended as {result.status}, not recording: {exc}"
            )
            return

        result.error = describe_error(exc)

        try:
            await self.job_repo.add_error(result.job_id, result.error)
        except Exception as e:
            logger.error(f"Could not store error record for job {result.job_id}: {e}")

        try:
            await self.job_repo.update_job_status(result.job_id, JobStatus.FAILED)
        except Exception as e:
            logger.error(f"Could not mark job {result.job_id} as failed: {e}")

        try:
            await self.task_repo.update_task_status(result.task_id, JobStatus.FAILED)
        except Exception as e:
            logger.error(f"Could not mark task {result.task_id} as failed: {e}")

        result.status = JobStatus.FAILED
        await self._publish(result)
