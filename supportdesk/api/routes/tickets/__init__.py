"""
Ticket Routes Module

Ticket-related API endpoints organized by functionality:

- crud.py: Create, list, get, update, delete tickets
- messages.py: Chat thread per ticket
- summarize.py: Summary generation for resolved tickets

All routes are combined into a single router for inclusion in the API.
"""

from fastapi import APIRouter

from .schemas import (
    CreateTicketRequest, UpdateTicketRequest, TicketListResponse,
    PostMessageRequest, MessageListResponse, SummarizeResponse, ActionResponse
)
from .crud import router as crud_router
from .messages import router as messages_router
from .summarize import router as summarize_router

router = APIRouter()
router.include_router(crud_router)
router.include_router(messages_router)
router.include_router(summarize_router)

__all__ = [
    "router",
    # Schemas
    "CreateTicketRequest", "UpdateTicketRequest", "TicketListResponse",
    "PostMessageRequest", "MessageListResponse", "SummarizeResponse", "ActionResponse"
]
