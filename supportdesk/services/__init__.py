"""Service modules - Business logic layer"""
from .auth_service import AuthService, hash_password, verify_password
from .ticket_service import TicketService
from .message_service import MessageService
from .admin_service import AdminService
from .summarization_service import SummarizationJob
from .llm import LangChainSummarizationModel, SummarizationModel, build_chat_model

__all__ = [
    "AuthService",
    "hash_password",
    "verify_password",
    "TicketService",
    "MessageService",
    "AdminService",
    "SummarizationJob",
    "LangChainSummarizationModel",
    "SummarizationModel",
    "build_chat_model",
]
