"""API Routes module"""
from fastapi import APIRouter

from .auth import router as auth_router
from .tickets import router as tickets_router
from .admin import router as admin_router
from .notifications import router as notifications_router
from .pages import router as pages_router

# Main API router
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(tickets_router, prefix="/tickets", tags=["Tickets"])
api_router.include_router(admin_router, prefix="/admin", tags=["Admin"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])

__all__ = ["api_router", "pages_router"]
