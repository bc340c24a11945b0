"""Ticket Repository - Data access for tickets"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from .mongo_client import TICKETS
from ..domain.models import Ticket
from ..domain.enums import TicketStatus, TicketPriority
from ..domain.errors import TicketNotFoundError
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)


class TicketRepository:
    """Repository for ticket operations"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self._tickets = db[TICKETS]

    @staticmethod
    def _to_model(doc: Dict[str, Any]) -> Ticket:
        doc.pop("_id", None)
        return Ticket.model_validate(doc)

    async def create_ticket(self, ticket: Ticket) -> Ticket:
        """Create a new ticket"""
        doc = ticket.model_dump()
        doc["_id"] = ticket.ticket_id

        await self._tickets.insert_one(doc)
        logger.info(f"Created ticket: {ticket.ticket_id}", extra={"ticket_id": ticket.ticket_id})
        return ticket

    async def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by ID"""
        doc = await self._tickets.find_one({"ticket_id": ticket_id})
        if doc:
            return self._to_model(doc)
        return None

    async def get_ticket_or_raise(self, ticket_id: str) -> Ticket:
        """Get ticket by ID or raise error"""
        ticket = await self.get_ticket(ticket_id)
        if not ticket:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found", details={"ticket_id": ticket_id})
        return ticket

    @staticmethod
    def _filter(
        customer_id: Optional[str] = None,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        assigned_to: Optional[str] = None
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if customer_id:
            query["customer_id"] = customer_id
        if status:
            query["status"] = status.value
        if priority:
            query["priority"] = priority.value
        if assigned_to:
            query["assigned_to"] = assigned_to
        return query

    async def list_tickets(
        self,
        customer_id: Optional[str] = None,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        assigned_to: Optional[str] = None,
        skip: int = 0,
        limit: int = 50
    ) -> List[Ticket]:
        """List tickets newest first"""
        query = self._filter(customer_id, status, priority, assigned_to)
        cursor = self._tickets.find(query).sort("created_at", DESCENDING).skip(skip).limit(limit)
        return [self._to_model(doc) async for doc in cursor]

    async def count_tickets(
        self,
        customer_id: Optional[str] = None,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        assigned_to: Optional[str] = None
    ) -> int:
        """Count tickets matching the same filters as list_tickets"""
        query = self._filter(customer_id, status, priority, assigned_to)
        return await self._tickets.count_documents(query)

    async def update_ticket(self, ticket_id: str, updates: Dict[str, Any]) -> Ticket:
        """Apply a partial update and return the confirmed row"""
        updates = dict(updates)
        updates["updated_at"] = utc_now()

        result = await self._tickets.find_one_and_update(
            {"ticket_id": ticket_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if result is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found", details={"ticket_id": ticket_id})

        logger.info(f"Updated ticket: {ticket_id}", extra={"ticket_id": ticket_id})
        return self._to_model(result)

    async def unassign_all(self, user_id: str) -> int:
        """Clear the assignee on every ticket assigned to a user"""
        result = await self._tickets.update_many(
            {"assigned_to": user_id},
            {"$set": {"assigned_to": None, "updated_at": utc_now()}}
        )
        return result.modified_count

    async def delete_ticket(self, ticket_id: str) -> bool:
        """Hard-delete a ticket"""
        result = await self._tickets.delete_one({"ticket_id": ticket_id})
        return result.deleted_count == 1

    async def set_summary_if_unset(
        self,
        ticket_id: str,
        summary: str,
        generated_at: datetime
    ) -> Optional[Ticket]:
        """
        Compare-and-swap write of the ticket summary.

        Applies only while the ticket is still resolved and has no summary.

        Returns:
            The updated ticket, or None when the guard did not match
        """
        result = await self._tickets.find_one_and_update(
            {
                "ticket_id": ticket_id,
                "status": TicketStatus.RESOLVED.value,
                "summary": None,
            },
            {"$set": {
                "summary": summary,
                "summary_generated_at": generated_at,
                "updated_at": generated_at,
            }},
            return_document=ReturnDocument.AFTER
        )
        if result is None:
            return None
        return self._to_model(result)
