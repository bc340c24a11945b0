"""Domain Models - Pydantic schemas for all entities"""
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, EmailStr, ConfigDict

from .enums import (
    Role, TicketStatus, TicketPriority, ChangeOperation, NotificationKind,
    SummarizeOutcome
)


# ============================================================================
# Identity
# ============================================================================

class Profile(BaseModel):
    """User profile; the role is the sole basis for route authorization"""
    model_config = ConfigDict(extra="ignore")

    user_id: str = Field(..., description="Stable user identifier")
    email: EmailStr = Field(..., description="Lower-cased login email")
    full_name: str = Field(default="", description="Display name")
    role: Role = Field(default=Role.CUSTOMER)
    password_hash: Optional[str] = Field(None, description="bcrypt hash, never exposed")
    created_at: datetime
    updated_at: datetime

    def public_dict(self) -> Dict[str, Any]:
        """Profile fields safe to return to clients"""
        return self.model_dump(mode="json", exclude={"password_hash"})


class SessionIdentity(BaseModel):
    """Identity carried by a valid session token"""
    user_id: str
    email: str


class ActorContext(BaseModel):
    """Authenticated caller of a request"""
    model_config = ConfigDict(extra="forbid")

    user_id: str = Field(..., description="User identifier")
    email: str = Field(..., description="User email")
    display_name: str = Field(default="", description="User display name")
    role: Role = Field(..., description="Role at request time")


# ============================================================================
# Tickets & Messages
# ============================================================================

class Ticket(BaseModel):
    """One support request"""
    model_config = ConfigDict(extra="ignore")

    ticket_id: str
    title: str
    description: str = ""
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.MEDIUM
    customer_id: str
    assigned_to: Optional[str] = None
    summary: Optional[str] = None
    summary_generated_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class Message(BaseModel):
    """One chat turn within a ticket thread"""
    model_config = ConfigDict(extra="ignore")

    message_id: str
    ticket_id: str
    sender_id: str
    sender_role: Role
    content: str
    created_at: datetime


# ============================================================================
# Realtime
# ============================================================================

class ChangeEvent(BaseModel):
    """Before/after pair for a ticket row, delivered by the change feed"""
    operation: ChangeOperation
    ticket_id: Optional[str] = None
    old: Optional[Dict[str, Any]] = None
    new: Optional[Dict[str, Any]] = None


class NotificationEvent(BaseModel):
    """Client-visible notification (toast or row refresh)"""
    kind: NotificationKind
    title: str
    message: str = ""
    ticket_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    def to_sse(self) -> str:
        """Render as a server-sent event frame"""
        return f"event: {self.kind.value}\ndata: {self.model_dump_json()}\n\n"


# ============================================================================
# Summarization
# ============================================================================

class SummarizeResult(BaseModel):
    """Outcome of one summarization job run"""
    outcome: SummarizeOutcome
    success: bool
    summary: Optional[str] = None
