"""
Ticket CRUD Routes

Create, read, list, update and delete ticket endpoints.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from ...deps import get_container, get_current_user_dep, require_roles
from ....container import ServiceContainer
from ....domain.models import ActorContext, Ticket
from ....domain.enums import Role, TicketStatus, TicketPriority
from ....utils.logger import get_logger
from .schemas import ActionResponse, CreateTicketRequest, TicketListResponse, UpdateTicketRequest

logger = get_logger(__name__)
router = APIRouter()


@router.post("/", response_model=Ticket, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    request: CreateTicketRequest,
    actor: ActorContext = Depends(require_roles(Role.CUSTOMER)),
    container: ServiceContainer = Depends(get_container)
):
    """
    Create a new ticket

    Only customers open tickets; the status always starts as open.
    """
    ticket = await container.ticket_service.create_ticket(
        title=request.title,
        description=request.description,
        priority=request.priority,
        actor=actor
    )
    logger.info(
        f"Created ticket: {ticket.ticket_id}",
        extra={"ticket_id": ticket.ticket_id, "user_id": actor.user_id}
    )
    return ticket


@router.get("/", response_model=TicketListResponse)
async def list_tickets(
    status: Optional[TicketStatus] = Query(None, description="Filter by status"),
    priority: Optional[TicketPriority] = Query(None, description="Filter by priority"),
    assigned_to: Optional[str] = Query(None, description="Filter by assignee user id"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    actor: ActorContext = Depends(get_current_user_dep),
    container: ServiceContainer = Depends(get_container)
):
    """
    List tickets, newest first

    Customers only ever see their own tickets.
    """
    tickets, total = await container.ticket_service.list_tickets(
        actor=actor,
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        skip=(page - 1) * page_size,
        limit=page_size
    )
    return TicketListResponse(items=tickets, page=page, page_size=page_size, total=total)


@router.get("/{ticket_id}", response_model=Ticket)
async def get_ticket(
    ticket_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    container: ServiceContainer = Depends(get_container)
):
    return await container.ticket_service.get_visible_ticket(ticket_id, actor)


@router.put("/{ticket_id}", response_model=Ticket)
async def update_ticket(
    ticket_id: str,
    request: UpdateTicketRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    container: ServiceContainer = Depends(get_container)
):
    """
    Update a ticket

    Customers may edit title, description and priority; support and admin
    may also change the status.
    """
    return await container.ticket_service.update_ticket(
        ticket_id,
        request.model_dump(exclude_unset=True),
        actor
    )


@router.delete("/{ticket_id}", response_model=ActionResponse)
async def delete_ticket(
    ticket_id: str,
    actor: ActorContext = Depends(require_roles(Role.ADMIN)),
    container: ServiceContainer = Depends(get_container)
):
    await container.ticket_service.delete_ticket(ticket_id, actor)
    return ActionResponse(success=True, details={"ticket_id": ticket_id})
