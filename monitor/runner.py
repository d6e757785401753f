"""Headless entry point running only the check scheduler."""
import asyncio
import signal
import logging
from database.connection import DatabaseConnection
from monitor.checker import MessageChecker
from monitor.scheduler import CheckScheduler
from shared.config import settings, validate_required_settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def main():
    """Main entry point for the monitor service."""
    validate_required_settings(settings)

    logger.info(f"Starting message monitor in '{settings.check_mode}' mode")

    db = await DatabaseConnection.init_mongo()
    redis_client = await DatabaseConnection.init_redis()

    checker = MessageChecker.from_settings(db, redis_client)
    scheduler = CheckScheduler.from_settings(checker.run_check_cycle)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    try:
        scheduler.start()
        await stop_event.wait()
    finally:
        await scheduler.stop()
        await DatabaseConnection.close_connections()
        logger.info("Monitor shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
