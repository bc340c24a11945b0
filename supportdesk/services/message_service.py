"""Message Service - Ticket chat threads"""
from typing import List

from .ticket_service import TicketService
from ..domain.models import ActorContext, Message
from ..domain.errors import ValidationError
from ..repositories.message_repo import MessageRepository
from ..utils.idgen import generate_message_id
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 5000


class MessageService:
    """Reads and appends chat messages on tickets the actor can see"""

    def __init__(self, messages: MessageRepository, tickets: TicketService):
        self.message_repo = messages
        self.ticket_service = tickets

    async def list_messages(
        self,
        ticket_id: str,
        actor: ActorContext,
        skip: int = 0,
        limit: int = 50
    ) -> List[Message]:
        await self.ticket_service.get_visible_ticket(ticket_id, actor)
        return await self.message_repo.list_for_ticket(ticket_id, skip=skip, limit=limit)

    async def post_message(self, ticket_id: str, content: str, actor: ActorContext) -> Message:
        """Append a message; the sender role is a snapshot of the caller's role"""
        content = content.strip()
        if not content or len(content) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Message must be 1-{MAX_MESSAGE_LENGTH} characters")

        await self.ticket_service.get_visible_ticket(ticket_id, actor)
        message = Message(
            message_id=generate_message_id(),
            ticket_id=ticket_id,
            sender_id=actor.user_id,
            sender_role=actor.role,
            content=content,
            created_at=utc_now(),
        )
        return await self.message_repo.add_message(message)
