"""Job routes for the REST API."""
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, HTTPException, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
import redis.asyncio as redis

from database.connection import get_db, get_redis
from database.repositories.job_repo import JobRepository
from database.repositories.task_repo import TaskRepository
from api.models.job import JobModel, TaskModel, ErrorModel
from api.schemas.responses import JobStatusResponse, CheckCycleResponse
from monitor.checker import MessageChecker


router = APIRouter(prefix="/jobs", tags=["jobs"])


async def get_checker(
    db: AsyncIOMotorDatabase = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis)
) -> MessageChecker:
    """Dependency for a checker wired from settings."""
    return MessageChecker.from_settings(db, redis_client)


async def _build_status(
    job: Dict[str, Any],
    job_repo: JobRepository,
    task_repo: TaskRepository
) -> JobStatusResponse:
    """Combine a job, its task and its error record into one response."""
    job_model = JobModel(**job)
    task = await task_repo.get_task_for_job(job_model.id)
    task_model: Optional[TaskModel] = TaskModel(**task) if task else None

    error_message = None
    if job_model.error_id:
        error = await job_repo.get_error(job_model.error_id)
        if error:
            error_message = ErrorModel(**error).message

    return JobStatusResponse(
        job_id=job_model.id,
        status=job_model.status,
        task_id=task_model.id if task_model else None,
        task_status=task_model.status if task_model else None,
        error=error_message,
        created_at=job_model.created_at,
        updated_at=job_model.updated_at
    )


@router.post("/check", response_model=CheckCycleResponse)
async def trigger_check(checker: MessageChecker = Depends(get_checker)):
    """
    Run one check cycle right now.

    The cycle is recorded in the ledger exactly like a scheduled one.
    """
    result = await checker.run_check_cycle()

    return CheckCycleResponse(
        job_id=result.job_id,
        task_id=result.task_id,
        status=result.status,
        success=result.success,
        counts=result.counts,
        warned=result.warned,
        error=result.error
    )


@router.get("/{job_id}/status", response_model=JobStatusResponse)
async def get_job_status(
    job_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Get the current status of a check job."""
    job_repo = JobRepository(db)
    task_repo = TaskRepository(db)

    job = await job_repo.get_job(job_id)

    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found"
        )

    return await _build_status(job, job_repo, task_repo)


@router.get("/", response_model=List[JobStatusResponse])
async def list_jobs(
    status_filter: str = None,
    limit: int = 50,
    skip: int = 0,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """List check jobs with optional status filter."""
    job_repo = JobRepository(db)
    task_repo = TaskRepository(db)

    jobs = await job_repo.list_jobs(status=status_filter, limit=limit, skip=skip)

    return [await _build_status(job, job_repo, task_repo) for job in jobs]
