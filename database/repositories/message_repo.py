"""Message repository for counting message traffic."""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union
from motor.motor_asyncio import AsyncIOMotorDatabase
from shared.utils import get_utc_now


@dataclass(frozen=True)
class NoFilter:
    """Count every message."""


@dataclass(frozen=True)
class BySender:
    """Count messages sent by one identity."""
    identity: str


@dataclass(frozen=True)
class ByRecipient:
    """Count messages received by one identity."""
    identity: str


MessageFilter = Union[NoFilter, BySender, ByRecipient]


def build_message_query(
    window_start: datetime,
    message_filter: MessageFilter,
    window_end: Optional[datetime] = None
) -> Dict[str, Any]:
    """Build the MongoDB query for messages inside the window."""
    query: Dict[str, Any] = {
        "sent_at": {"$gte": window_start, "$lte": window_end or get_utc_now()}
    }

    if isinstance(message_filter, BySender):
        query["sender"] = message_filter.identity
    elif isinstance(message_filter, ByRecipient):
        query["recipient"] = message_filter.identity
    elif not isinstance(message_filter, NoFilter):
        raise TypeError(f"Unsupported message filter: {message_filter!r}")

    return query


class MessageRepository:
    """Read-only repository over the messages collection."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.messages

    async def count_messages_since(
        self,
        window_start: datetime,
        message_filter: MessageFilter = NoFilter()
    ) -> int:
        """Count messages sent between window_start and now."""
        query = build_message_query(window_start, message_filter)
        return await self.collection.count_documents(query)
