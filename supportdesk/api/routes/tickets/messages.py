"""
Ticket Chat Routes

Read and append the message thread of a ticket.
"""

from fastapi import APIRouter, Depends, Query, status

from ...deps import get_container, get_current_user_dep
from ....container import ServiceContainer
from ....domain.models import ActorContext, Message
from .schemas import MessageListResponse, PostMessageRequest

router = APIRouter()


@router.get("/{ticket_id}/messages", response_model=MessageListResponse)
async def list_messages(
    ticket_id: str,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    actor: ActorContext = Depends(get_current_user_dep),
    container: ServiceContainer = Depends(get_container)
):
    """Messages oldest first"""
    messages = await container.message_service.list_messages(ticket_id, actor, skip=offset, limit=limit)
    return MessageListResponse(items=messages, offset=offset, limit=limit)


@router.post("/{ticket_id}/messages", response_model=Message, status_code=status.HTTP_201_CREATED)
async def post_message(
    ticket_id: str,
    request: PostMessageRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    container: ServiceContainer = Depends(get_container)
):
    return await container.message_service.post_message(ticket_id, request.content, actor)
