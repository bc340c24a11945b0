"""API module - Routes and dependencies"""
from .deps import get_container, get_current_user_dep, get_session_token, require_roles

__all__ = ["get_container", "get_current_user_dep", "get_session_token", "require_roles"]
