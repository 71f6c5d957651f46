"""Auth session API schemas.

Wire keys are camelCase (sessionId, authUrl, hintCode...); Python
attributes stay snake_case through an alias generator.
"""

from __future__ import annotations

__all__ = [
    "PollResponse",
    "StartSessionRequest",
    "StartSessionResponse",
    "StatusResponse",
]

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StartSessionRequest(_CamelModel):
    """Optional body for POST /auth/start."""

    callback_url: str | None = Field(default=None, max_length=2048)


class StartSessionResponse(_CamelModel):
    """Response when starting a session.

    Attributes:
        session_id: Opaque session id for poll/status calls.
        auth_url: Interactive page the human opens to scan the QR code.
        expires_at: Pending deadline in epoch milliseconds.
    """

    session_id: str
    auth_url: str
    expires_at: int


class PollResponse(_CamelModel):
    """Response when polling a session. Never carries the credential."""

    status: Literal["pending", "complete", "failed"]
    hint_code: str | None = None
    qr_code: str | None = None


class StatusResponse(_CamelModel):
    """Response for the caller's status query."""

    status: Literal["pending", "complete", "failed"]
    jwt: str | None = None
    hint_code: str | None = None
