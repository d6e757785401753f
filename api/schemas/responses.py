"""Response schemas for API endpoints."""
from typing import Dict, Optional
from datetime import datetime
from pydantic import BaseModel, Field
from api.models.job import JobStatusEnum


class JobStatusResponse(BaseModel):
    """Response schema for a check job and its task."""
    job_id: str = Field(..., description="Unique job identifier")
    status: JobStatusEnum = Field(..., description="Current job status")
    task_id: Optional[str] = Field(None, description="Identifier of the job's task")
    task_status: Optional[JobStatusEnum] = Field(None, description="Current task status")
    error: Optional[str] = Field(None, description="Error message when the job failed")
    created_at: datetime = Field(..., description="Job creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class CheckCycleResponse(BaseModel):
    """Response schema for a manually triggered check."""
    job_id: str = Field(..., description="Job created for this check")
    task_id: str = Field(..., description="Task created for this check")
    status: JobStatusEnum = Field(..., description="Final status of the check")
    success: bool = Field(..., description="Whether the check completed without fault")
    counts: Dict[str, int] = Field(default_factory=dict, description="Message counts per direction")
    warned: bool = Field(..., description="Whether a warning email was created")
    error: Optional[str] = Field(None, description="Fault description for failed checks")


class ErrorResponse(BaseModel):
    """Schema for error responses."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
