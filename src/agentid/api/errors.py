"""Structured API error handling.

This module provides:
- ErrorCode enum with the service's wire error codes
- APIError exception class for structured error responses
- Exception handlers that recover every domain error at the HTTP boundary

Usage:
    from agentid.api.errors import APIError, ErrorCode

    raise APIError(
        status_code=404,
        code=ErrorCode.SESSION_NOT_FOUND,
        message="Session not found or expired.",
    )

Response format (a failed poll also carries top-level status and hintCode):
    {
        "detail": {
            "code": "SESSION_NOT_FOUND",
            "message": "Session not found or expired.",
            "details": {...}
        }
    }
"""

from __future__ import annotations

__all__ = [
    "APIError",
    "ErrorCode",
    "api_error_handler",
    "domain_error_handler",
    "http_exception_handler",
    "unhandled_error_handler",
    "validation_error_handler",
]

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agentid.constants import ISSUANCE_ERROR
from agentid.exceptions import (
    AgentIDError,
    ConfigurationError,
    IssuanceError,
    PollRateLimitedError,
    ProviderRejectedError,
    ProviderUnreachableError,
    SessionNotFoundError,
)
from agentid.telemetry.system import get_system_logger


class ErrorCode(str, Enum):
    """API error codes for programmatic handling."""

    # Session errors (400, 404, 429)
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    MISSING_SESSION_ID = "MISSING_SESSION_ID"
    RATE_LIMITED = "RATE_LIMITED"

    # Identity provider errors (502)
    PROVIDER_UNREACHABLE = "PROVIDER_UNREACHABLE"
    PROVIDER_ERROR = "PROVIDER_ERROR"

    # Configuration errors (503)
    SERVICE_MISCONFIGURED = "SERVICE_MISCONFIGURED"

    # Issuance errors (500)
    ISSUANCE_FAILED = "ISSUANCE_FAILED"

    # Validation errors (400, 422)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Generic errors
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class APIError(HTTPException):
    """Structured API error with error code.

    Attributes:
        status_code: HTTP status code.
        code: Error code from ErrorCode enum.
        error_message: Human-readable error message.
        error_details: Optional contextual details.
        body: Optional top-level fields written beside "detail".
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> None:
        """Initialize structured API error.

        Args:
            status_code: HTTP status code.
            code: Error code from ErrorCode enum.
            message: Human-readable error message.
            details: Optional contextual details (varies by error type).
            headers: Optional response headers (e.g., Retry-After).
            body: Optional top-level response fields, so a failed poll still
                carries the poll response's status and hintCode.
        """
        self.code = code
        self.error_message = message
        self.error_details = details
        self.body = body

        detail: dict[str, Any] = {
            "code": code.value,
            "message": message,
        }
        if details:
            detail["details"] = details

        super().__init__(status_code=status_code, detail=detail, headers=headers)


def to_api_error(exc: AgentIDError) -> APIError:
    """Map a domain exception to its structured API error.

    Messages are fixed strings: provider and key errors carry internal
    detail that is logged, not returned.
    """
    if isinstance(exc, SessionNotFoundError):
        return APIError(404, ErrorCode.SESSION_NOT_FOUND, "Session not found or expired.")
    if isinstance(exc, PollRateLimitedError):
        return APIError(
            429,
            ErrorCode.RATE_LIMITED,
            f"Poll no more than once every few seconds; retry after {exc.retry_after}s.",
            details={"retryAfter": exc.retry_after},
            headers={"Retry-After": str(exc.retry_after)},
        )
    if isinstance(exc, ProviderUnreachableError):
        return APIError(502, ErrorCode.PROVIDER_UNREACHABLE, "Identity provider unreachable. Retry the poll.")
    if isinstance(exc, ProviderRejectedError):
        details = {"providerCode": exc.code} if exc.code else None
        return APIError(502, ErrorCode.PROVIDER_ERROR, "Identity provider rejected the request.", details=details)
    if isinstance(exc, ConfigurationError):
        return APIError(503, ErrorCode.SERVICE_MISCONFIGURED, "Service is not configured for authentication.")
    if isinstance(exc, IssuanceError):
        failed = {"status": "failed", "hintCode": ISSUANCE_ERROR}
        return APIError(
            500,
            ErrorCode.ISSUANCE_FAILED,
            "Identity verified but the credential could not be issued.",
            details=failed,
            body=failed,
        )
    return APIError(500, ErrorCode.INTERNAL_ERROR, "Internal error.")


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions with structured response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={**(exc.body or {}), "detail": exc.detail},
        headers=exc.headers,
    )


async def domain_error_handler(request: Request, exc: AgentIDError) -> JSONResponse:
    """Recover a domain exception into a structured response.

    Server-side failures (5xx) are logged with their internal message.
    """
    api_error = to_api_error(exc)
    if api_error.status_code >= 500:
        get_system_logger().warning(
            {
                "event": "request_failed",
                "message": f"{request.method} {request.url.path} failed: {exc}",
                "error_type": type(exc).__name__,
                "failure_type": exc.failure_type,
                "status_code": api_error.status_code,
            }
        )
    return await api_error_handler(request, api_error)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so an unexpected error never escapes as a bare 500."""
    get_system_logger().error(
        {
            "event": "unhandled_exception",
            "message": f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
            "error_type": type(exc).__name__,
        },
        exc_info=exc,
    )
    return await api_error_handler(
        request,
        APIError(500, ErrorCode.INTERNAL_ERROR, "Internal error."),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors with structured response.

    Args:
        request: FastAPI request object.
        exc: RequestValidationError from Pydantic.

    Returns:
        JSONResponse with structured error detail including validation_errors.
    """
    errors = exc.errors()
    first_error = errors[0] if errors else {}

    loc = first_error.get("loc", [])
    msg = first_error.get("msg", "Validation error")

    if len(errors) == 1:
        field_parts = [str(part) for part in loc if part != "body"]
        field_name = ".".join(field_parts)
        message = f"{field_name}: {msg}" if field_name else msg
    else:
        message = f"{len(errors)} validation errors"

    detail: dict[str, Any] = {
        "code": ErrorCode.VALIDATION_ERROR.value,
        "message": message,
        "validation_errors": [
            {
                "loc": list(e.get("loc", [])),
                "msg": e.get("msg", ""),
                "type": e.get("type", ""),
            }
            for e in errors
        ],
    }

    return JSONResponse(
        status_code=422,
        content={"detail": detail},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap plain HTTPException details in the structured format.

    Passes through already-structured details from APIError.
    """
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    code = _status_to_error_code(exc.status_code)
    message = str(exc.detail) if exc.detail else f"HTTP {exc.status_code}"

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"code": code.value, "message": message}},
        headers=getattr(exc, "headers", None),
    )


def _status_to_error_code(status_code: int) -> ErrorCode:
    """Map HTTP status code to default error code."""
    mapping = {
        400: ErrorCode.VALIDATION_ERROR,
        404: ErrorCode.NOT_FOUND,
        429: ErrorCode.RATE_LIMITED,
        500: ErrorCode.INTERNAL_ERROR,
        502: ErrorCode.PROVIDER_UNREACHABLE,
        503: ErrorCode.SERVICE_UNAVAILABLE,
    }
    return mapping.get(status_code, ErrorCode.INTERNAL_ERROR)
