"""Job and task model definitions."""
from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class JobStatusEnum(str, Enum):
    """Job and task status enumeration."""
    SCHEDULED = "SCHEDULED"
    BUSY = "BUSY"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class JobModel(BaseModel):
    """Job model for database representation."""
    id: str = Field(alias="_id")
    status: JobStatusEnum
    operation: str
    creator: str
    error_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True


class TaskModel(BaseModel):
    """Task model for database representation."""
    id: str = Field(alias="_id")
    job_id: str
    index: int = 0
    status: JobStatusEnum
    operation: str
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True


class ErrorModel(BaseModel):
    """Error record attached to a failed job."""
    id: str = Field(alias="_id")
    job_id: str
    message: str
    created_at: datetime

    class Config:
        populate_by_name = True
