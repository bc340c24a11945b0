"""
Ticket Schemas

Request and response models for ticket API endpoints.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ....domain.enums import TicketStatus, TicketPriority
from ....domain.models import Message, Ticket


# =============================================================================
# Ticket CRUD Schemas
# =============================================================================

class CreateTicketRequest(BaseModel):
    """Request to create a new ticket"""
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., max_length=5000)
    priority: TicketPriority

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title cannot be blank")
        return v.strip()


class UpdateTicketRequest(BaseModel):
    """Partial ticket update; unknown fields are rejected"""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=5000)
    priority: Optional[TicketPriority] = None
    status: Optional[TicketStatus] = None


class TicketListResponse(BaseModel):
    """Response for ticket list"""
    items: List[Ticket]
    page: int
    page_size: int
    total: int


# =============================================================================
# Chat Schemas
# =============================================================================

class PostMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class MessageListResponse(BaseModel):
    items: List[Message]
    offset: int
    limit: int


# =============================================================================
# Summarization Schemas
# =============================================================================

class SummarizeResponse(BaseModel):
    """Summary result; skip cases are 200 with success reflecting the outcome"""
    success: bool
    summary: Optional[str] = None
    outcome: str


class ActionResponse(BaseModel):
    success: bool
    details: Dict[str, Any] = Field(default_factory=dict)
