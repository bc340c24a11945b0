"""
API Middleware

    - correlation: X-Correlation-Id on every request and log line
    - access_gate: role-based redirects for page routes
    - error_handlers: flat {error, code, details} error bodies
"""
from .correlation import CorrelationIdMiddleware
from .access_gate import AccessGateMiddleware, is_gated
from .error_handlers import error_response, register_error_handlers

__all__ = [
    "CorrelationIdMiddleware", "AccessGateMiddleware", "is_gated",
    "error_response", "register_error_handlers",
]
