"""Repository modules - Data access layer"""
from .mongo_client import create_mongo_client, prepare_database, health_check
from .ticket_repo import TicketRepository
from .message_repo import MessageRepository
from .profile_repo import ProfileRepository

__all__ = [
    "create_mongo_client",
    "prepare_database",
    "health_check",
    "TicketRepository",
    "MessageRepository",
    "ProfileRepository",
]
