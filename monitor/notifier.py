"""Warning notifier that drops warning emails into the outbox."""
import logging
from typing import Any, Dict, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from shared.config import settings
from shared.utils import generate_email_id, get_utc_now

logger = logging.getLogger(__name__)


OUTBOX_FOLDER = "outbox"

WARNING_EMAIL_SUBJECT = "No messages sent in the message centre"

WARNING_EMAIL_TEXT = """
Hello,

No activity was detected in the message centre since this morning.
You might want to double check if everything is running properly.

Have a nice day,
The message monitor
"""

WARNING_EMAIL_HTML = """
<p>Hello,</p>
<p>No activity was detected in the message centre since this morning.</p>
<p>You might want to double check if everything is running properly.</p>
<p>Have a nice day,</p>
<p>The message monitor</p>
"""


class WarningNotifier:
    """Creates warning emails for a delivery service to pick up."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        email_from: Optional[str] = None,
        email_to: Optional[str] = None
    ):
        self.collection = db.emails
        self.email_from = email_from or settings.email_from
        self.email_to = email_to or settings.email_to

    async def create_warning(self, task_id: str) -> Dict[str, Any]:
        """Place a warning email for the given task in the outbox."""
        email = {
            "_id": generate_email_id(),
            "task_id": task_id,
            "message_from": self.email_from,
            "message_to": self.email_to,
            "subject": WARNING_EMAIL_SUBJECT,
            "plain_text": WARNING_EMAIL_TEXT,
            "html": WARNING_EMAIL_HTML,
            "folder": OUTBOX_FOLDER,
            "created_at": get_utc_now()
        }

        await self.collection.insert_one(email)
        logger.info(f"Warning email {email['_id']} queued for {self.email_to}")
        return email
