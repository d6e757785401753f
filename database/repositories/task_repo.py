"""Task repository for the tasks belonging to check jobs."""
from typing import Optional, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from database.repositories.job_repo import JobStatus, CHECK_MESSAGES_OPERATION
from shared.utils import generate_task_id, get_utc_now


class TaskRepository:
    """Repository for Task ledger operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.tasks

    async def create_task(
        self,
        job_id: str,
        operation: str = CHECK_MESSAGES_OPERATION,
        index: int = 0
    ) -> Dict[str, Any]:
        """Create a task under the given job in the SCHEDULED state."""
        now = get_utc_now()

        task = {
            "_id": generate_task_id(),
            "job_id": job_id,
            "index": index,
            "status": JobStatus.SCHEDULED,
            "operation": operation,
            "created_at": now,
            "updated_at": now
        }

        await self.collection.insert_one(task)
        return task

    async def get_task_for_job(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Get the first task of a job."""
        return await self.collection.find_one({"job_id": job_id, "index": 0})

    async def update_task_status(self, task_id: str, status: str) -> bool:
        """Update task status."""
        result = await self.collection.update_one(
            {"_id": task_id},
            {
                "$set": {
                    "status": status,
                    "updated_at": get_utc_now()
                }
            }
        )
        return result.modified_count > 0
