# Models module
from .job import JobModel, TaskModel, ErrorModel, JobStatusEnum

__all__ = ["JobModel", "TaskModel", "ErrorModel", "JobStatusEnum"]
