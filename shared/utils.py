"""Shared utility functions."""
import uuid
from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def generate_job_id() -> str:
    """Generate a unique job ID."""
    return f"job_{uuid.uuid4().hex[:12]}"


def generate_task_id() -> str:
    """Generate a unique task ID."""
    return f"task_{uuid.uuid4().hex[:12]}"


def generate_error_id() -> str:
    """Generate a unique error record ID."""
    return f"err_{uuid.uuid4().hex[:12]}"


def generate_email_id() -> str:
    """Generate a unique email ID."""
    return f"email_{uuid.uuid4().hex[:12]}"


def get_utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def get_local_now(tz_name: str) -> datetime:
    """Get the current time in the named time zone."""
    return datetime.now(ZoneInfo(tz_name))


def start_of_business_day(now: datetime, hour: int = 8) -> datetime:
    """
    Return today's business-day boundary for the given moment.

    The boundary is always on the same calendar day as `now`, so a check
    running before the boundary hour gets a window starting later today.
    """
    return now.replace(hour=hour, minute=0, second=0, microsecond=0)
