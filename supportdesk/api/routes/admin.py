"""Admin API Routes - Ticket workflows and staff management"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field

from ..deps import get_container, require_roles
from ...container import ServiceContainer
from ...domain.models import ActorContext, Ticket
from ...domain.enums import Role, TicketStatus, TicketPriority
from ...utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class StatusUpdateRequest(BaseModel):
    status: TicketStatus


class PriorityUpdateRequest(BaseModel):
    priority: TicketPriority


class AssignRequest(BaseModel):
    """Assignee user id; null unassigns"""
    assigned_to: Optional[str] = Field(None, min_length=1)


class ConvertStaffRequest(BaseModel):
    email: EmailStr


class StaffResponse(BaseModel):
    user_id: str
    email: str
    full_name: str
    role: Role


def _staff_response(profile) -> StaffResponse:
    return StaffResponse(
        user_id=profile.user_id,
        email=profile.email,
        full_name=profile.full_name,
        role=profile.role
    )


# =============================================================================
# Ticket workflows
# =============================================================================

@router.patch("/tickets/{ticket_id}/status", response_model=Ticket)
async def set_ticket_status(
    ticket_id: str,
    request: StatusUpdateRequest,
    actor: ActorContext = Depends(require_roles(Role.ADMIN, Role.SUPPORT)),
    container: ServiceContainer = Depends(get_container)
):
    return await container.ticket_service.set_status(ticket_id, request.status, actor)


@router.patch("/tickets/{ticket_id}/priority", response_model=Ticket)
async def set_ticket_priority(
    ticket_id: str,
    request: PriorityUpdateRequest,
    actor: ActorContext = Depends(require_roles(Role.ADMIN, Role.SUPPORT)),
    container: ServiceContainer = Depends(get_container)
):
    return await container.ticket_service.set_priority(ticket_id, request.priority, actor)


@router.patch("/tickets/{ticket_id}/assign", response_model=Ticket)
async def assign_ticket(
    ticket_id: str,
    request: AssignRequest,
    actor: ActorContext = Depends(require_roles(Role.ADMIN)),
    container: ServiceContainer = Depends(get_container)
):
    """Assign to a support or admin user"""
    return await container.ticket_service.assign(ticket_id, request.assigned_to, actor)


# =============================================================================
# Staff management
# =============================================================================

@router.get("/staff", response_model=List[StaffResponse])
async def list_staff(
    actor: ActorContext = Depends(require_roles(Role.ADMIN)),
    container: ServiceContainer = Depends(get_container)
):
    profiles = await container.admin_service.list_staff(actor)
    return [_staff_response(p) for p in profiles]


@router.post("/staff", response_model=StaffResponse)
async def convert_to_staff(
    request: ConvertStaffRequest,
    actor: ActorContext = Depends(require_roles(Role.ADMIN)),
    container: ServiceContainer = Depends(get_container)
):
    """Give an existing user support access"""
    profile = await container.admin_service.convert_to_staff(request.email, actor)
    return _staff_response(profile)


@router.delete("/staff/{user_id}", response_model=StaffResponse)
async def remove_staff_access(
    user_id: str,
    actor: ActorContext = Depends(require_roles(Role.ADMIN)),
    container: ServiceContainer = Depends(get_container)
):
    """Demote to customer; their tickets are unassigned"""
    profile = await container.admin_service.remove_access(user_id, actor)
    return _staff_response(profile)
