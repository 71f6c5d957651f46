"""Error response schemas for API documentation.

The actual error handling is in api/errors.py.
"""

from __future__ import annotations

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
]

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Structured error detail.

    Attributes:
        code: Error code for programmatic handling (e.g., "SESSION_NOT_FOUND").
        message: Human-readable error message.
        details: Optional contextual details (varies by error type).
    """

    code: str = Field(
        description="Error code for programmatic handling",
        examples=["SESSION_NOT_FOUND", "PROVIDER_UNREACHABLE", "RATE_LIMITED"],
    )
    message: str = Field(
        description="Human-readable error message",
        examples=["Session not found or expired."],
    )
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Error response envelope: {"detail": {...}}."""

    detail: ErrorDetail
