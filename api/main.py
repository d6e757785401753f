"""Main FastAPI application."""
import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, WebSocket, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from database.connection import DatabaseConnection
from api.routes import jobs_router
from api.schemas.responses import ErrorResponse
from api.websocket import websocket_endpoint, redis_subscriber
from monitor.checker import MessageChecker
from monitor.scheduler import CheckScheduler
from shared.config import settings, validate_required_settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# Background task for Redis subscriber
subscriber_task = None
scheduler = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global subscriber_task, scheduler

    # Startup
    validate_required_settings(settings)

    db = await DatabaseConnection.init_mongo()
    redis_client = await DatabaseConnection.init_redis()

    subscriber_task = asyncio.create_task(redis_subscriber(redis_client))

    if settings.run_scheduler_in_api:
        checker = MessageChecker.from_settings(db, redis_client)
        scheduler = CheckScheduler.from_settings(checker.run_check_cycle)
        scheduler.start()

    yield

    # Shutdown
    if scheduler:
        await scheduler.stop()
        scheduler = None

    if subscriber_task:
        subscriber_task.cancel()
        try:
            await subscriber_task
        except asyncio.CancelledError:
            pass

    await DatabaseConnection.close_connections()


# Create FastAPI app
app = FastAPI(
    title="Message Activity Monitor",
    description="Checks daily message traffic and raises warning emails when it stalls",
    version="1.0.0",
    lifespan=lifespan
)


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Internal server error", detail=str(exc)).model_dump()
    )


# Include routers
app.include_router(jobs_router)


# WebSocket endpoints
@app.websocket("/ws")
async def websocket_all(websocket: WebSocket):
    """WebSocket endpoint for all job updates."""
    await websocket_endpoint(websocket)


@app.websocket("/ws/jobs/{job_id}")
async def websocket_job(websocket: WebSocket, job_id: str):
    """WebSocket endpoint for specific job updates."""
    await websocket_endpoint(websocket, job_id)


@app.get("/", response_class=PlainTextResponse)
async def root():
    """Liveness endpoint."""
    return "Hello from message-monitor :)"


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug
    )
