"""Cron-driven scheduler that runs check cycles at fixed times of day."""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Iterator, List, Optional
from zoneinfo import ZoneInfo
from croniter import croniter

from monitor.checker import CycleResult
from shared.config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CronTrigger:
    """A named cron expression that fires a check."""
    name: str
    expression: str


def fire_times(expression: str, start: datetime) -> Iterator[datetime]:
    """Yield the fire times of the cron expression strictly after `start`."""
    it = croniter(expression, start)
    while True:
        yield it.get_next(datetime)


def seconds_until(fire_time: datetime, now: datetime) -> float:
    """Seconds to wait for `fire_time`; zero when it already passed."""
    return max(0.0, (fire_time - now).total_seconds())


class CheckScheduler:
    """Runs the same check cycle from several independent cron triggers."""

    def __init__(
        self,
        run_cycle: Callable[[], Awaitable[CycleResult]],
        triggers: List[CronTrigger],
        tz_name: str = "Europe/Brussels"
    ):
        for trigger in triggers:
            if not croniter.is_valid(trigger.expression):
                raise ValueError(f"Invalid cron expression for {trigger.name}: {trigger.expression}")

        self.run_cycle = run_cycle
        self.triggers = triggers
        self.tz = ZoneInfo(tz_name)
        self._tasks: List[asyncio.Task] = []

    @classmethod
    def from_settings(
        cls,
        run_cycle: Callable[[], Awaitable[CycleResult]],
        config: Settings = None
    ) -> "CheckScheduler":
        """Create the two daily triggers from settings."""
        config = config or settings
        triggers = [
            CronTrigger("First check", config.first_check_cron),
            CronTrigger("Second check", config.second_check_cron),
        ]
        return cls(run_cycle, triggers, config.check_timezone)

    async def run_scheduled_check(self, trigger_name: str) -> Optional[CycleResult]:
        """
        Run one cycle on behalf of a trigger.

        This is the scheduler boundary: whatever happens inside the cycle is
        logged here and never raised, so later triggers keep firing.
        """
        now = datetime.now(self.tz).isoformat()
        logger.info(f"{trigger_name} triggered by cron job at {now}")

        try:
            result = await self.run_cycle()
        except Exception as e:
            logger.error(f"An error occurred during {trigger_name.lower()} at {now}: {e}")
            return None

        if result.success:
            logger.info(
                f"{trigger_name} finished: job {result.job_id} succeeded "
                f"(counts={result.counts}, warned={result.warned})"
            )
        else:
            logger.error(f"{trigger_name} finished: job {result.job_id} failed: {result.error}")
        return result

    async def _run_trigger(self, trigger: CronTrigger):
        """Sleep until each fire time of the trigger and run a check."""
        # Walk fire times from the schedule itself so an early wake-up never fires twice
        for fire_time in fire_times(trigger.expression, datetime.now(self.tz)):
            logger.info(f"{trigger.name} scheduled at {fire_time.isoformat()}")
            await asyncio.sleep(seconds_until(fire_time, datetime.now(self.tz)))
            await self.run_scheduled_check(trigger.name)

    def start(self):
        """Register one background task per trigger."""
        if self._tasks:
            return
        for trigger in self.triggers:
            self._tasks.append(asyncio.create_task(self._run_trigger(trigger)))
        logger.info(f"Scheduler started with {len(self._tasks)} triggers")

    async def stop(self):
        """Cancel all trigger tasks."""
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        logger.info("Scheduler stopped")
