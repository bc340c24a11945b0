"""
Access Gate Middleware

Runs the access gate before every page request. API, static and health
routes are not pages and pass through untouched; the API authorizes per
route through its dependencies.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import RedirectResponse, Response

from ...domain.models import ActorContext
from ...utils.logger import get_logger

logger = get_logger(__name__)

BYPASS_PREFIXES = ("/api", "/static", "/health")
BYPASS_PATHS = frozenset({"/favicon.ico"})


def is_gated(path: str) -> bool:
    """True for page paths the gate must evaluate"""
    if path in BYPASS_PATHS:
        return False
    for prefix in BYPASS_PREFIXES:
        if path == prefix or path.startswith(prefix + "/"):
            return False
    return True


class AccessGateMiddleware(BaseHTTPMiddleware):
    """Redirects page requests the gate does not allow"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        request.state.actor = None
        if not is_gated(path):
            return await call_next(request)

        container = request.app.state.container
        token = request.cookies.get(container.settings.session_cookie_name)
        decision = await container.gate.evaluate(path, token)

        if not decision.allowed:
            return RedirectResponse(decision.location, status_code=302)

        if decision.identity is not None and decision.role is not None:
            request.state.actor = ActorContext(
                user_id=decision.identity.user_id,
                email=decision.identity.email,
                role=decision.role,
            )
        return await call_next(request)
