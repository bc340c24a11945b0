"""Message Repository - Append-only chat thread per ticket"""
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from .mongo_client import MESSAGES
from ..domain.models import Message
from ..utils.logger import get_logger

logger = get_logger(__name__)


class MessageRepository:
    """Repository for ticket chat messages"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self._messages = db[MESSAGES]

    async def add_message(self, message: Message) -> Message:
        """Append a message to a ticket thread"""
        doc = message.model_dump()
        doc["_id"] = message.message_id
        await self._messages.insert_one(doc)
        logger.info(
            f"Added message {message.message_id}",
            extra={"ticket_id": message.ticket_id, "user_id": message.sender_id}
        )
        return message

    async def list_for_ticket(
        self,
        ticket_id: str,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Message]:
        """Messages of a ticket, oldest first; all of them when limit is None"""
        cursor = (
            self._messages.find({"ticket_id": ticket_id})
            .sort([("created_at", ASCENDING), ("message_id", ASCENDING)])
            .skip(skip)
        )
        if limit is not None:
            cursor = cursor.limit(limit)

        messages = []
        async for doc in cursor:
            doc.pop("_id", None)
            messages.append(Message.model_validate(doc))
        return messages

    async def delete_for_ticket(self, ticket_id: str) -> int:
        """Remove the thread of a deleted ticket"""
        result = await self._messages.delete_many({"ticket_id": ticket_id})
        return result.deleted_count
