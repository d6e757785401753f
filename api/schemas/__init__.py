# Schemas module
from .responses import (
    JobStatusResponse,
    CheckCycleResponse,
    ErrorResponse
)

__all__ = [
    "JobStatusResponse",
    "CheckCycleResponse",
    "ErrorResponse"
]
