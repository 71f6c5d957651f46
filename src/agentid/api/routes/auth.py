"""Auth session API endpoints.

- POST /auth/start - Begin a BankID transaction, returns sessionId + authUrl
- GET /auth/status?sessionId= - Caller's status query (returns the credential)
- GET /auth/{session_id}/poll - Advance the session by one provider round-trip
- POST /auth/{session_id}/cancel - Best-effort provider cancel

Routes mounted at: /auth

Domain errors raised by the state machine are recovered into structured
responses by the handlers in api/errors.py.
"""

from __future__ import annotations

__all__ = ["router"]

from typing import Annotated

from fastapi import APIRouter, Body, Query, Request, Response

from agentid.api.deps import ConfigDep, MachineDep
from agentid.api.errors import APIError, ErrorCode
from agentid.api.schemas import (
    ErrorResponse,
    PollResponse,
    StartSessionRequest,
    StartSessionResponse,
    StatusResponse,
)

router = APIRouter()


def _auth_url(request: Request, public_base_url: str | None, session_id: str) -> str:
    base = public_base_url or str(request.base_url)
    return f"{base.rstrip('/')}/auth/{session_id}"


@router.post(
    "/start",
    response_model=StartSessionResponse,
    responses={502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def start_session(
    request: Request,
    machine: MachineDep,
    config: ConfigDep,
    body: Annotated[StartSessionRequest | None, Body()] = None,
) -> StartSessionResponse:
    """Start a BankID identity check.

    Returns:
        sessionId, the interactive authUrl and the pending deadline (epoch ms).

    Raises:
        APIError: 503 if provider credentials are absent, 502 on provider error.
    """
    callback_url = body.callback_url if body is not None else None
    started = await machine.start(callback_url)

    return StartSessionResponse(
        session_id=started.session_id,
        auth_url=_auth_url(request, config.api.public_base_url, started.session_id),
        expires_at=int(started.expires_at.timestamp() * 1000),
    )


@router.get(
    "/status",
    response_model=StatusResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_status(
    machine: MachineDep,
    session_id: Annotated[str | None, Query(alias="sessionId")] = None,
) -> StatusResponse:
    """Read the stored session state, including the credential once complete.

    Never contacts the identity provider.
    """
    if not session_id:
        raise APIError(
            status_code=400,
            code=ErrorCode.MISSING_SESSION_ID,
            message="Query parameter 'sessionId' is required.",
        )

    result = await machine.status(session_id)
    return StatusResponse(
        status=result.status.value,
        jwt=result.credential,
        hint_code=result.hint_code,
    )


@router.get(
    "/{session_id}/poll",
    response_model=PollResponse,
    response_model_exclude_none=True,
    responses={
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def poll_session(session_id: str, machine: MachineDep) -> PollResponse:
    """Poll the identity provider once and advance the session.

    Terminal sessions answer from the store without a provider call.
    Callers must not poll one session more than once every 2 seconds.
    """
    result = await machine.poll(session_id)
    return PollResponse(
        status=result.status.value,
        hint_code=result.hint_code,
        qr_code=result.qr_image,
    )


@router.post(
    "/{session_id}/cancel",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
)
async def cancel_session(session_id: str, machine: MachineDep) -> Response:
    """Ask the provider to cancel the transaction. The session is left as is."""
    await machine.cancel(session_id)
    return Response(status_code=204)
