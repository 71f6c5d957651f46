"""Session record models.

A Session is one in-progress or completed identity check. It is created
pending by the start endpoint and moves exactly once to a terminal status:

    pending -> complete   (credential + user_attributes set)
    pending -> failed     (failure_reason set)

Once terminal, a session is never mutated again. The record is stored as a
flat JSON object under "<prefix>:session:<session_id>".
"""

from __future__ import annotations

__all__ = [
    "Session",
    "SessionStatus",
    "UserAttributes",
]

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    """Session status. Transitions only pending -> complete | failed."""

    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.PENDING


class UserAttributes(BaseModel):
    """Identity attributes released by the provider.

    Retained inside the store for audit only. Never returned across the
    service boundary and never placed in a credential.
    """

    personal_number: str = Field(repr=False)
    name: str = ""
    given_name: str = ""
    surname: str = ""


class Session(BaseModel):
    """Stored session record.

    Attributes:
        session_id: Opaque caller-facing identifier.
        provider_session_id: Identifier assigned by the identity provider.
        status: Current status (monotonic).
        credential: Signed token, only when status is complete.
        user_attributes: Provider attributes, only when status is complete.
        failure_reason: Hint code or ISSUANCE_ERROR, only when status is failed.
        created_at: Creation time (UTC).
        completed_at: Time the session reached a terminal status (UTC).
    """

    session_id: str
    provider_session_id: str
    status: SessionStatus = SessionStatus.PENDING
    credential: str | None = Field(default=None, repr=False)
    user_attributes: UserAttributes | None = Field(default=None, repr=False)
    failure_reason: str | None = None
    created_at: datetime
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
