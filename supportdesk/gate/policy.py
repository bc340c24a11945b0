"""
Route Policy

Static, process-wide mapping from URL path prefix to the roles allowed to
reach it. Paths that match no protected prefix and no auth route are public.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

from ..domain.enums import Role


LOGIN_ROUTE = "/login"
EMPLOYEE_LOGIN_ROUTE = "/employee-login"
UNAUTHORIZED_ROUTE = "/unauthorized"

ROLE_HOME: Mapping[Role, str] = MappingProxyType({
    Role.ADMIN: "/admin-dashboard",
    Role.SUPPORT: "/support-dashboard",
    Role.CUSTOMER: "/customer-dashboard",
})

_missing_homes = set(Role) - set(ROLE_HOME)
if _missing_homes:
    raise RuntimeError(f"No home route for roles: {sorted(r.value for r in _missing_homes)}")


class PathKind(str, Enum):
    PUBLIC = "public"
    AUTH = "auth"
    PROTECTED = "protected"


@dataclass(frozen=True)
class ProtectedPrefix:
    """One protected portal: who may enter and where anonymous users sign in"""
    prefix: str
    allowed_roles: FrozenSet[Role]
    login_route: str


@dataclass(frozen=True)
class PathClass:
    """Classification of a request path"""
    kind: PathKind
    prefix: Optional[str] = None
    allowed_roles: FrozenSet[Role] = frozenset()
    login_route: Optional[str] = None


def _matches(path: str, prefix: str) -> bool:
    """Prefix match on a path-segment boundary"""
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


class RoutePolicy:
    """Immutable route -> role policy"""

    def __init__(
        self,
        protected: Tuple[ProtectedPrefix, ...],
        auth_routes: Tuple[str, ...] = (LOGIN_ROUTE, EMPLOYEE_LOGIN_ROUTE)
    ):
        for entry in protected:
            if not entry.allowed_roles:
                raise ValueError(f"Protected prefix {entry.prefix} has no allowed roles")
        # Longest prefix wins when prefixes nest
        self._protected = tuple(sorted(protected, key=lambda p: len(p.prefix), reverse=True))
        self._auth_routes = tuple(auth_routes)

    @property
    def protected(self) -> Tuple[ProtectedPrefix, ...]:
        return self._protected

    def classify(self, path: str) -> PathClass:
        """Classify a path as public, auth route or protected"""
        for entry in self._protected:
            if _matches(path, entry.prefix):
                return PathClass(
                    kind=PathKind.PROTECTED,
                    prefix=entry.prefix,
                    allowed_roles=entry.allowed_roles,
                    login_route=entry.login_route,
                )
        for route in self._auth_routes:
            if _matches(path, route):
                return PathClass(kind=PathKind.AUTH, prefix=route)
        return PathClass(kind=PathKind.PUBLIC)

    def allows(self, path: str, role: Role) -> bool:
        """True if a role may reach a path"""
        path_class = self.classify(path)
        if path_class.kind != PathKind.PROTECTED:
            return True
        return role in path_class.allowed_roles


def home_for(role: Role) -> str:
    """Dashboard a role lands on after sign-in"""
    return ROLE_HOME[role]


DEFAULT_POLICY = RoutePolicy(
    protected=(
        ProtectedPrefix("/admin-dashboard", frozenset({Role.ADMIN}), EMPLOYEE_LOGIN_ROUTE),
        ProtectedPrefix("/support-dashboard", frozenset({Role.ADMIN, Role.SUPPORT}), EMPLOYEE_LOGIN_ROUTE),
        ProtectedPrefix("/customer-dashboard", frozenset({Role.CUSTOMER}), LOGIN_ROUTE),
    )
)
