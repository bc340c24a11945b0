"""
Access Gate - request-time authorization for page routes

Decides allow / redirect-to-login / redirect-to-unauthorized /
redirect-to-role-home for every page request. Every failure resolves to a
redirect; the gate never raises and never allows by accident.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .policy import DEFAULT_POLICY, PathKind, RoutePolicy, UNAUTHORIZED_ROUTE, home_for
from ..domain.enums import Role
from ..domain.models import SessionIdentity
from ..services.auth_service import AuthService
from ..utils.logger import get_logger

logger = get_logger(__name__)


class GateAction(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of evaluating one request"""
    action: GateAction
    location: Optional[str] = None
    reason: str = ""
    identity: Optional[SessionIdentity] = None
    role: Optional[Role] = None

    @property
    def allowed(self) -> bool:
        return self.action == GateAction.ALLOW

    @classmethod
    def allow(cls, reason: str, identity: Optional[SessionIdentity] = None, role: Optional[Role] = None) -> "GateDecision":
        return cls(GateAction.ALLOW, None, reason, identity, role)

    @classmethod
    def redirect(cls, location: str, reason: str, identity: Optional[SessionIdentity] = None) -> "GateDecision":
        return cls(GateAction.REDIRECT, location, reason, identity)


class AccessGate:
    """Evaluates the route policy against the caller's session"""

    def __init__(self, auth: AuthService, policy: RoutePolicy = DEFAULT_POLICY):
        self._auth = auth
        self._policy = policy

    async def evaluate(self, path: str, token: Optional[str]) -> GateDecision:
        """Evaluate a request; never raises"""
        try:
            decision = await self._evaluate(path, token)
        except Exception as e:
            logger.error(f"Access gate failed, denying: {e}", exc_info=True, extra={"path": path})
            decision = GateDecision.redirect(UNAUTHORIZED_ROUTE, "gate_error")

        logger.debug(
            f"Gate {decision.action.value} {path}",
            extra={"path": path, "decision": decision.reason}
        )
        return decision

    async def _evaluate(self, path: str, token: Optional[str]) -> GateDecision:
        path_class = self._policy.classify(path)
        identity = self._auth.resolve_session(token)

        if identity is None:
            if path_class.kind == PathKind.PROTECTED:
                return GateDecision.redirect(path_class.login_route, "anonymous_protected")
            return GateDecision.allow("anonymous_public")

        if path_class.kind == PathKind.PROTECTED:
            try:
                role = await self._auth.get_role(identity.user_id)
            except Exception as e:
                logger.warning(
                    f"Role lookup failed, denying: {e}",
                    extra={"path": path, "user_id": identity.user_id}
                )
                return GateDecision.redirect(UNAUTHORIZED_ROUTE, "role_lookup_failed", identity)

            if role not in path_class.allowed_roles:
                logger.info(
                    "Role not permitted for path",
                    extra={"path": path, "user_id": identity.user_id, "role": role.value}
                )
                return GateDecision.redirect(UNAUTHORIZED_ROUTE, "role_not_allowed", identity)
            return GateDecision.allow("role_allowed", identity, role)

        if path_class.kind == PathKind.AUTH:
            try:
                role = await self._auth.get_role(identity.user_id)
            except Exception as e:
                # Let the user reach the sign-in page again
                logger.warning(f"Role lookup failed on auth route: {e}", extra={"user_id": identity.user_id})
                return GateDecision.allow("auth_route_role_unknown", identity)
            return GateDecision.redirect(home_for(role), "already_signed_in", identity)

        return GateDecision.allow("authenticated_public", identity)
