"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Les erreurs métier (`VersioningError`) et HTTP sont converties en une enveloppe unique
`{success: false, code, message, trace_id}`.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from pitch_history.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNAUTHORIZED,
    RETRY_AFTER_SECONDS,
)
from pitch_history.domain.errors import (
    ConflictError,
    InvalidRestoreTargetError,
    NotFoundError,
    TransientError,
    VersioningError,
)

log = structlog.get_logger(__name__)


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    code: str
    message: str
    trace_id: str | None = None


class APIError(HTTPException):
    """Custom API error with standard envelope."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        trace_id: str | None = None,
    ) -> None:
        """Initialize an API error with standardized envelope."""
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.message = message
        self.trace_id = trace_id


class ErrorCodes:
    """Standard error codes for the API."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


_HTTP_ERROR_CODES = {
    400: ErrorCodes.BAD_REQUEST,
    401: ErrorCodes.UNAUTHORIZED,
    403: ErrorCodes.FORBIDDEN,
    404: ErrorCodes.NOT_FOUND,
    422: ErrorCodes.VALIDATION_ERROR,
    500: ErrorCodes.INTERNAL_ERROR,
    503: ErrorCodes.SERVICE_UNAVAILABLE,
}

# ordre significatif: classes les plus spécifiques d'abord
_VERSIONING_STATUS: tuple[tuple[type[VersioningError], int], ...] = (
    (NotFoundError, HTTP_NOT_FOUND),
    (ConflictError, HTTP_FORBIDDEN),
    (InvalidRestoreTargetError, HTTP_BAD_REQUEST),
    (TransientError, HTTP_SERVICE_UNAVAILABLE),
)


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    trace_id: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    envelope = ErrorEnvelope(code=code, message=message, trace_id=trace_id)
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "code": envelope.code,
            "message": envelope.message,
            "trace_id": envelope.trace_id,
        },
        headers=headers,
    )


def extract_trace_id(request: Request) -> str | None:
    """Extract trace ID from request headers or request state."""
    trace_id = request.headers.get("X-Trace-ID")
    if trace_id:
        return trace_id
    return getattr(request.state, "trace_id", None)


def status_for(exc: VersioningError) -> int:
    for cls, status in _VERSIONING_STATUS:
        if isinstance(exc, cls):
            return status
    return HTTP_INTERNAL_SERVER_ERROR


def handle_versioning_error(request: Request, exc: VersioningError) -> JSONResponse:
    """Traduit une erreur métier en réponse HTTP (503 + Retry-After pour la contention)."""
    trace_id = extract_trace_id(request)
    status = status_for(exc)
    headers = None
    if isinstance(exc, TransientError):
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}
    log.warning(
        "versioning_error",
        code=exc.code,
        error_message=exc.message,
        status_code=status,
        trace_id=trace_id,
    )
    return create_error_response(status, exc.code, exc.message, trace_id, headers=headers)


def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions with standard envelope."""
    trace_id = extract_trace_id(request) or exc.trace_id
    log.warning(
        "api_error",
        code=exc.code,
        error_message=exc.message,
        status_code=exc.status_code,
        trace_id=trace_id,
    )
    return create_error_response(exc.status_code, exc.code, exc.message, trace_id)


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTPException (FastAPI/Starlette) with standard envelope."""
    trace_id = extract_trace_id(request)
    code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return create_error_response(
        exc.status_code, code, str(exc.detail), trace_id, headers=getattr(exc, "headers", None)
    )


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions with standard envelope."""
    trace_id = extract_trace_id(request)
    log.error(
        "unexpected_error",
        trace_id=trace_id,
        exception_type=type(exc).__name__,
        exc_info=exc,
    )
    return create_error_response(
        HTTP_INTERNAL_SERVER_ERROR,
        ErrorCodes.INTERNAL_ERROR,
        "An unexpected error occurred",
        trace_id,
    )


def unauthorized(message: str, trace_id: str | None = None) -> APIError:
    """Create a 401 Unauthorized error."""
    return APIError(HTTP_UNAUTHORIZED, ErrorCodes.UNAUTHORIZED, message, trace_id)


def forbidden(message: str, trace_id: str | None = None) -> APIError:
    """Create a 403 Forbidden error."""
    return APIError(HTTP_FORBIDDEN, ErrorCodes.FORBIDDEN, message, trace_id)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(VersioningError, handle_versioning_error)  # type: ignore[arg-type]
    app.add_exception_handler(APIError, handle_api_error)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_generic_exception)
