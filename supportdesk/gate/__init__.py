"""Access gate - route policy and request authorization"""
from .policy import (
    DEFAULT_POLICY, RoutePolicy, ProtectedPrefix, PathKind, PathClass, home_for,
    LOGIN_ROUTE, EMPLOYEE_LOGIN_ROUTE, UNAUTHORIZED_ROUTE
)
from .access_gate import AccessGate, GateAction, GateDecision

__all__ = [
    "DEFAULT_POLICY",
    "RoutePolicy",
    "ProtectedPrefix",
    "PathKind",
    "PathClass",
    "home_for",
    "LOGIN_ROUTE",
    "EMPLOYEE_LOGIN_ROUTE",
    "UNAUTHORIZED_ROUTE",
    "AccessGate",
    "GateAction",
    "GateDecision",
]
