"""API Dependencies - Common dependencies for routes"""
from typing import Callable, Optional
from fastapi import Depends, Header, Request

from ..container import ServiceContainer
from ..domain.models import ActorContext
from ..domain.enums import Role
from ..domain.errors import AuthenticationError, AuthorizationError, NotFoundError


def get_container(request: Request) -> ServiceContainer:
    """Application container built in the lifespan"""
    return request.app.state.container


def get_session_token(
    request: Request,
    authorization: Optional[str] = Header(None)
) -> Optional[str]:
    """
    Raw session token from the Authorization header or the session cookie

    Returns the token without 'Bearer ' prefix.
    """
    if authorization:
        if authorization.startswith("Bearer "):
            return authorization[7:]
        return authorization
    container = get_container(request)
    return request.cookies.get(container.settings.session_cookie_name)


async def get_current_user_dep(
    token: Optional[str] = Depends(get_session_token),
    container: ServiceContainer = Depends(get_container)
) -> ActorContext:
    """
    Dependency to get the current user

    Validates the session token and loads the role from the profile store,
    so role changes apply on the next request.

    Raises:
        AuthenticationError: Token missing or invalid, or profile gone
    """
    identity = container.codec.identity(token)
    try:
        profile = await container.auth.get_profile(identity.user_id)
    except NotFoundError:
        raise AuthenticationError("No profile for this session")

    return ActorContext(
        user_id=profile.user_id,
        email=profile.email,
        display_name=profile.full_name,
        role=profile.role,
    )


def require_roles(*roles: Role) -> Callable:
    """Dependency factory restricting a route to some roles"""
    allowed = frozenset(roles)

    async def _require(actor: ActorContext = Depends(get_current_user_dep)) -> ActorContext:
        if actor.role not in allowed:
            raise AuthorizationError(
                "Insufficient role for this operation",
                details={"role": actor.role.value}
            )
        return actor

    return _require
