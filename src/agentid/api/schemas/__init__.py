"""API schemas (Pydantic models) for request/response validation."""

from __future__ import annotations

# Auth session schemas
from agentid.api.schemas.auth import (
    PollResponse,
    StartSessionRequest,
    StartSessionResponse,
    StatusResponse,
)

# Error schemas
from agentid.api.schemas.errors import ErrorDetail, ErrorResponse

# Key set / health schemas
from agentid.api.schemas.meta import HealthResponse, JsonWebKey, JsonWebKeySet

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "JsonWebKey",
    "JsonWebKeySet",
    "PollResponse",
    "StartSessionRequest",
    "StartSessionResponse",
    "StatusResponse",
]
