"""
Error Handlers

Every error leaves the API as a flat JSON body: {error, code, details},
with the request's correlation id echoed in X-Correlation-Id.
"""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ...domain.errors import DomainError
from ...utils.logger import get_logger, get_correlation_id

logger = get_logger(__name__)


def error_response(
    status_code: int,
    error: str,
    code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    """JSON error body; `code` is left out when None"""
    content: Dict[str, Any] = {"error": error}
    if code is not None:
        content["code"] = code
    content["details"] = details or {}
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers={"X-Correlation-Id": get_correlation_id() or ""}
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    # Expected failures: bad input, missing rows, wrong role
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(f"{exc.error_code}: {exc.message}", extra={"path": request.url.path})
    return error_response(exc.http_status, exc.message, exc.error_code, exc.details)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed payloads and query parameters are 400s, not FastAPI's 422"""
    errors = jsonable_encoder(exc.errors())
    logger.warning(
        f"Request validation failed: {request.method} {request.url.path} ({len(errors)} errors)",
        extra={"path": request.url.path}
    )
    return error_response(
        status.HTTP_400_BAD_REQUEST, "Request validation failed", "VALIDATION_ERROR", {"errors": errors}
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error: {exc}", exc_info=True, extra={"path": request.url.path})
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred", "INTERNAL_ERROR"
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
