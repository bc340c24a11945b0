"""Domain Enumerations - Roles, ticket states and event kinds"""
from enum import Enum


class Role(str, Enum):
    """Access level of a user profile"""
    CUSTOMER = "customer"
    SUPPORT = "support"
    ADMIN = "admin"

    @property
    def is_staff(self) -> bool:
        return self in (Role.SUPPORT, Role.ADMIN)


class TicketStatus(str, Enum):
    """Ticket status"""
    OPEN = "open"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    """Ticket priority"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Portal(str, Enum):
    """Sign-in portal"""
    CUSTOMER = "customer"
    EMPLOYEE = "employee"


class ChangeOperation(str, Enum):
    """Row mutation kinds carried by the change feed"""
    INSERT = "insert"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"


class NotificationKind(str, Enum):
    """Client-visible notification events"""
    TICKET_UPDATED = "ticket_updated"
    TICKET_RESOLVED = "ticket_resolved"
    SUMMARY_GENERATED = "summary_generated"
    SUMMARY_FAILED = "summary_failed"


class SummarizeOutcome(str, Enum):
    """Result of a summarization run"""
    GENERATED = "generated"
    ALREADY_SUMMARIZED = "already_summarized"
    NOT_RESOLVED = "not_resolved"
    CONCURRENT_WRITE = "concurrent_write"
