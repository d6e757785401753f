"""Publisher for job status updates on Redis."""
import json
import logging
import redis.asyncio as redis
from redis.exceptions import RedisError
from shared.config import settings

logger = logging.getLogger(__name__)


class StatusPublisher:
    """Publishes job/task status transitions for WebSocket listeners."""

    def __init__(self, redis_client: redis.Redis, channel: str = None):
        self.redis = redis_client
        self.channel = channel or settings.redis_status_channel

    async def publish_status(self, job_id: str, task_id: str, status: str):
        """Publish a status update. Redis failures are logged, not raised."""
        update = {
            "type": "job_update",
            "job_id": job_id,
            "task_id": task_id,
            "status": status
        }
        try:
            await self.redis.publish(self.channel, json.dumps(update))
        except RedisError as e:
            logger.warning(f"Could not publish status {status} for job {job_id}: {e}")
