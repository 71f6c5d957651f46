"""Pydantic models for audit logs.

The 'time' field is None when a model is created; ISO8601Formatter adds
the timestamp during serialization, so there is a single source of truth
for timestamps.

PII rule: no model here has a field for the personal number, names or the
credential. Only the pseudonymous subject may appear.
"""

from __future__ import annotations

__all__ = ["AuthEvent"]

from typing import Literal

from pydantic import BaseModel, Field


class AuthEvent(BaseModel):
    """One session lifecycle log entry (auth.jsonl).

    session_id is hashed by AuthLogger before it is written.
    """

    time: str | None = Field(
        None,
        description="ISO 8601 timestamp, added by formatter during serialization",
    )

    event_type: Literal[
        "session_started",
        "session_completed",
        "session_failed",
        "issuance_failed",
        "provider_unreachable",
    ]
    status: Literal["Success", "Failure", "Pending"]

    session_id: str | None = None
    subject: str | None = None  # pseudonymous 'sub', never the personal number
    jti: str | None = None
    hint_code: str | None = None

    error_type: str | None = None
    error_message: str | None = None
    message: str | None = None
