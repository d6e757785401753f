"""WebSocket handler forwarding job status updates."""
import asyncio
import json
import logging
from typing import Dict, Optional, Set
from fastapi import WebSocket, WebSocketDisconnect
import redis.asyncio as redis
from shared.config import settings

logger = logging.getLogger(__name__)

ALL_JOBS = "*"


class ConnectionManager:
    """Tracks WebSocket clients by the job they watch."""

    def __init__(self):
        # Watched job id (or ALL_JOBS) -> connections
        self.watchers: Dict[str, Set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, job_id: Optional[str] = None):
        """Accept a connection and register it for a job or for all jobs."""
        await websocket.accept()
        self.watchers.setdefault(job_id or ALL_JOBS, set()).add(websocket)

    def disconnect(self, websocket: WebSocket, job_id: Optional[str] = None):
        """Forget a connection."""
        key = job_id or ALL_JOBS
        connections = self.watchers.get(key)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            del self.watchers[key]

    async def dispatch(self, update: dict):
        """Send an update to the job's watchers and to everyone watching all jobs."""
        for key in (update.get("job_id"), ALL_JOBS):
            for connection in list(self.watchers.get(key, ())):
                try:
                    await connection.send_json(update)
                except Exception as e:
                    logger.info(f"Dropping WebSocket client: {e}")
                    self.disconnect(connection, None if key == ALL_JOBS else key)


# Global connection manager
manager = ConnectionManager()


async def redis_subscriber(redis_client: redis.Redis):
    """Subscribe to the status channel and forward updates to WebSocket clients."""
    pubsub = redis_client.pubsub()
    await pubsub.subscribe(settings.redis_status_channel)

    try:
        async for message in pubsub.listen():
            if message["type"] != "message":
                continue
            try:
                update = json.loads(message["data"])
            except json.JSONDecodeError:
                logger.warning(f"Ignoring malformed status update: {message['data']}")
                continue
            await manager.dispatch(update)
    except asyncio.CancelledError:
        pass
    finally:
        await pubsub.unsubscribe(settings.redis_status_channel)
        await pubsub.close()


async def websocket_endpoint(websocket: WebSocket, job_id: str = None):
    """WebSocket endpoint for job status updates."""
    await manager.connect(websocket, job_id)

    try:
        while True:
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=settings.ws_heartbeat_interval
                )
                if data == "ping":
                    await websocket.send_text("pong")
            except asyncio.TimeoutError:
                await websocket.send_json({"type": "heartbeat"})
    except WebSocketDisconnect:
        manager.disconnect(websocket, job_id)
