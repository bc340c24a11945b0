"""Auth API Routes - Sign-in, sign-up and sign-out"""
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field

from ..deps import get_container
from ...container import ServiceContainer
from ...domain.enums import Portal
from ...domain.models import Profile
from ...gate import home_for

router = APIRouter()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    portal: Portal = Portal.CUSTOMER


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    full_name: str = Field("", max_length=200)


def set_session_cookie(response: Response, container: ServiceContainer, token: str) -> None:
    settings = container.settings
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_ttl_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def _session_body(profile: Profile, token: str) -> dict:
    return {
        "user": profile.public_dict(),
        "access_token": token,
        "redirect_to": home_for(profile.role),
    }


@router.post("/login")
async def login(
    request: LoginRequest,
    response: Response,
    container: ServiceContainer = Depends(get_container)
):
    """
    Sign in through the customer or employee portal

    Sets the session cookie and returns the role's home page.
    """
    profile, token = await container.auth.authenticate(request.email, request.password, request.portal)
    set_session_cookie(response, container, token)
    return _session_body(profile, token)


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest,
    response: Response,
    container: ServiceContainer = Depends(get_container)
):
    """Create a customer account and sign it in"""
    profile, token = await container.auth.register_customer(request.email, request.password, request.full_name)
    set_session_cookie(response, container, token)
    return _session_body(profile, token)


@router.post("/logout")
async def logout(
    response: Response,
    container: ServiceContainer = Depends(get_container)
):
    response.delete_cookie(container.settings.session_cookie_name)
    return {"success": True}
