"""Job repository for the check job ledger (jobs and error records)."""
from typing import Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from shared.utils import generate_job_id, generate_error_id, get_utc_now


SERVICE_NAME = "message-monitor"
CHECK_MESSAGES_OPERATION = "check-messages"


class JobStatus:
    """Job and task status constants."""
    SCHEDULED = "SCHEDULED"
    BUSY = "BUSY"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class JobRepository:
    """Repository for Job ledger operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.jobs
        self.errors = db.errors

    async def create_job(self, operation: str = CHECK_MESSAGES_OPERATION) -> Dict[str, Any]:
        """Create a new job record in the SCHEDULED state."""
        job_id = generate_job_id()
        now = get_utc_now()

        job = {
            "_id": job_id,
            "status": JobStatus.SCHEDULED,
            "operation": operation,
            "creator": SERVICE_NAME,
            "error_id": None,
            "created_at": now,
            "updated_at": now
        }

        await self.collection.insert_one(job)
        return job

    async def get_job(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Get a job by ID."""
        return await self.collection.find_one({"_id": job_id})

    async def update_job_status(self, job_id: str, status: str) -> bool:
        """Update job status."""
        result = await self.collection.update_one(
            {"_id": job_id},
            {
                "$set": {
                    "status": status,
                    "updated_at": get_utc_now()
                }
            }
        )
        return result.modified_count > 0

    async def add_error(self, job_id: str, message: str) -> Dict[str, Any]:
        """Create an error record and attach it to the job."""
        error = {
            "_id": generate_error_id(),
            "job_id": job_id,
            "message": message,
            "created_at": get_utc_now()
        }

        await self.errors.insert_one(error)
        await self.collection.update_one(
            {"_id": job_id},
            {"$set": {"error_id": error["_id"], "updated_at": get_utc_now()}}
        )
        return error

    async def get_error(self, error_id: str) -> Optional[Dict[str, Any]]:
        """Get an error record by ID."""
        return await self.errors.find_one({"_id": error_id})

    async def list_jobs(
        self,
        status: Optional[str] = None,
        limit: int = 50,
        skip: int = 0
    ) -> List[Dict[str, Any]]:
        """List check jobs with optional status filter, newest first."""
        query = {"operation": CHECK_MESSAGES_OPERATION}
        if status:
            query["status"] = status

        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        return await cursor.to_list(length=limit)
