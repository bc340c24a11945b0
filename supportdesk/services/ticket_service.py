"""Ticket Service - Ticket management business logic"""
from typing import Any, Dict, List, Optional, Tuple

from ..domain.models import Ticket, ActorContext
from ..domain.enums import Role, TicketStatus, TicketPriority
from ..domain.errors import AuthorizationError, TicketNotFoundError, ValidationError
from ..repositories.ticket_repo import TicketRepository
from ..repositories.message_repo import MessageRepository
from ..repositories.profile_repo import ProfileRepository
from ..utils.idgen import generate_ticket_id
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)

CUSTOMER_EDITABLE_FIELDS = frozenset({"title", "description", "priority"})
STAFF_EDITABLE_FIELDS = CUSTOMER_EDITABLE_FIELDS | {"status"}


class TicketService:
    """Service for ticket operations"""

    def __init__(
        self,
        tickets: TicketRepository,
        messages: MessageRepository,
        profiles: ProfileRepository
    ):
        self.ticket_repo = tickets
        self.message_repo = messages
        self.profile_repo = profiles

    # =========================================================================
    # Visibility
    # =========================================================================

    @staticmethod
    def can_view(ticket: Ticket, actor: ActorContext) -> bool:
        """Customers see their own tickets; staff see all"""
        return actor.role.is_staff or ticket.customer_id == actor.user_id

    async def get_visible_ticket(self, ticket_id: str, actor: ActorContext) -> Ticket:
        """
        Get a ticket the actor may see

        A customer asking for someone else's ticket gets a not-found, so
        ticket ids of other customers are not disclosed.
        """
        ticket = await self.ticket_repo.get_ticket_or_raise(ticket_id)
        if not self.can_view(ticket, actor):
            raise TicketNotFoundError(f"Ticket {ticket_id} not found", details={"ticket_id": ticket_id})
        return ticket

    # =========================================================================
    # CRUD
    # =========================================================================

    async def create_ticket(
        self,
        title: str,
        description: str,
        priority: TicketPriority,
        actor: ActorContext
    ) -> Ticket:
        """Create a ticket for the calling customer; status always starts open"""
        if actor.role != Role.CUSTOMER:
            raise AuthorizationError("Only customers can create tickets")

        now = utc_now()
        ticket = Ticket(
            ticket_id=generate_ticket_id(),
            title=title,
            description=description,
            status=TicketStatus.OPEN,
            priority=priority,
            customer_id=actor.user_id,
            created_at=now,
            updated_at=now,
        )
        return await self.ticket_repo.create_ticket(ticket)

    async def list_tickets(
        self,
        actor: ActorContext,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        assigned_to: Optional[str] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[Ticket], int]:
        """List tickets visible to the actor, newest first"""
        customer_id = None if actor.role.is_staff else actor.user_id
        tickets = await self.ticket_repo.list_tickets(
            customer_id=customer_id,
            status=status,
            priority=priority,
            assigned_to=assigned_to,
            skip=skip,
            limit=limit
        )
        total = await self.ticket_repo.count_tickets(
            customer_id=customer_id,
            status=status,
            priority=priority,
            assigned_to=assigned_to
        )
        return tickets, total

    async def update_ticket(
        self,
        ticket_id: str,
        updates: Dict[str, Any],
        actor: ActorContext
    ) -> Ticket:
        """
        Partially update a ticket

        Customers may change title, description and priority of their own
        tickets; staff may also change the status.
        """
        ticket = await self.get_visible_ticket(ticket_id, actor)

        allowed = STAFF_EDITABLE_FIELDS if actor.role.is_staff else CUSTOMER_EDITABLE_FIELDS
        changes = {k: v for k, v in updates.items() if v is not None}
        forbidden = sorted(set(changes) - allowed)
        if forbidden:
            raise ValidationError(
                f"Fields not editable: {', '.join(forbidden)}",
                details={"fields": forbidden}
            )
        if not changes:
            return ticket

        if "title" in changes and not str(changes["title"]).strip():
            raise ValidationError("Title cannot be empty")

        return await self.ticket_repo.update_ticket(ticket_id, _to_storage(changes))

    async def delete_ticket(self, ticket_id: str, actor: ActorContext) -> None:
        """Hard-delete a ticket and its thread (admin only)"""
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete tickets")

        await self.ticket_repo.get_ticket_or_raise(ticket_id)
        await self.message_repo.delete_for_ticket(ticket_id)
        await self.ticket_repo.delete_ticket(ticket_id)
        logger.info(f"Deleted ticket {ticket_id}", extra={"ticket_id": ticket_id, "user_id": actor.user_id})

    # =========================================================================
    # Staff workflows
    # =========================================================================

    async def set_status(self, ticket_id: str, status: TicketStatus, actor: ActorContext) -> Ticket:
        _require_staff(actor)
        ticket = await self.ticket_repo.update_ticket(ticket_id, {"status": status.value})
        logger.info(
            f"Status of {ticket_id} set to {status.value}",
            extra={"ticket_id": ticket_id, "user_id": actor.user_id}
        )
        return ticket

    async def set_priority(self, ticket_id: str, priority: TicketPriority, actor: ActorContext) -> Ticket:
        _require_staff(actor)
        return await self.ticket_repo.update_ticket(ticket_id, {"priority": priority.value})

    async def assign(self, ticket_id: str, assignee_id: Optional[str], actor: ActorContext) -> Ticket:
        """
        Assign a ticket to a support or admin user, or unassign with None

        Raises:
            ProfileNotFoundError: Assignee does not exist
            ValidationError: Assignee is a customer
        """
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Only admins can assign tickets")

        if assignee_id is not None:
            assignee = await self.profile_repo.get_profile_or_raise(assignee_id)
            if not assignee.role.is_staff:
                raise ValidationError(
                    "Tickets can only be assigned to support or admin users",
                    details={"user_id": assignee_id, "role": assignee.role.value}
                )

        await self.ticket_repo.get_ticket_or_raise(ticket_id)
        ticket = await self.ticket_repo.update_ticket(ticket_id, {"assigned_to": assignee_id})
        logger.info(
            f"Assigned {ticket_id} to {assignee_id}",
            extra={"ticket_id": ticket_id, "user_id": actor.user_id}
        )
        return ticket


def _require_staff(actor: ActorContext) -> None:
    if not actor.role.is_staff:
        raise AuthorizationError("Support or admin access required")


def _to_storage(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Enum values as their stored strings"""
    return {k: (v.value if isinstance(v, (TicketStatus, TicketPriority)) else v) for k, v in changes.items()}
