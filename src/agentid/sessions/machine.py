"""Auth session state machine.

Drives a session from pending to exactly one terminal state in response
to external polling. Nothing here runs on a timer: every transition is
the side effect of a poll() call.

    pending --(provider Complete, credential signed)--> complete
    pending --(provider Complete, signing failed)-----> failed (ISSUANCE_ERROR)
    pending --(provider Failed)-----------------------> failed (hint code)

Each poll of a pending session:
1. Short-circuit if the stored session is already terminal (no provider call)
2. Enforce the per-session poll spacing
3. Make exactly one provider round-trip
4. Persist a terminal state through store.transition(expected=pending), so
   only the first poller to observe completion writes; a loser discards its
   freshly signed token and answers from the stored record

ProviderUnreachableError never mutates the session.
"""

from __future__ import annotations

__all__ = [
    "AuthSessionMachine",
    "PollResult",
    "StartResult",
    "StatusResult",
]

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from agentid.constants import ISSUANCE_ERROR, NOT_STARTED_HINT_CODE
from agentid.exceptions import (
    ConfigurationError,
    IssuanceError,
    PollRateLimitedError,
    ProviderUnreachableError,
    SessionNotFoundError,
)
from agentid.provider.outcomes import Complete, Failed, NotStarted, Pending
from agentid.sessions.models import Session, SessionStatus, UserAttributes

if TYPE_CHECKING:
    from agentid.issuance.issuer import CredentialIssuer
    from agentid.provider.client import GrandIDClient
    from agentid.security.rate_limiter import PollRateTracker
    from agentid.sessions.store import SessionStore
    from agentid.telemetry.auth_logger import AuthLogger


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class StartResult:
    """A newly started session.

    Attributes:
        session_id: Caller-facing session id.
        expires_at: When the pending session will be reclaimed.
    """

    session_id: str
    expires_at: datetime


@dataclass(frozen=True)
class PollResult:
    """Outcome of one poll. Never carries the credential.

    Attributes:
        status: Session status after this poll.
        hint_code: Provider hint (pending/failed) or ISSUANCE_ERROR.
        qr_image: Refreshed QR image while pending.
    """

    status: SessionStatus
    hint_code: str | None = None
    qr_image: str | None = None


@dataclass(frozen=True)
class StatusResult:
    """Stored session state for the caller's status query.

    Attributes:
        status: Current session status.
        credential: Signed token when complete.
        hint_code: Failure reason when failed.
    """

    status: SessionStatus
    credential: str | None = field(default=None, repr=False)
    hint_code: str | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _stored_poll_result(session: Session) -> PollResult:
    if session.status is SessionStatus.COMPLETE:
        return PollResult(status=SessionStatus.COMPLETE)
    if session.status is SessionStatus.FAILED:
        return PollResult(status=SessionStatus.FAILED, hint_code=session.failure_reason)
    return PollResult(status=SessionStatus.PENDING)


# =============================================================================
# State machine
# =============================================================================


class AuthSessionMachine:
    """Composes the store, provider client and issuer.

    Constructed once at startup with its collaborators injected; holds no
    per-session state of its own.

    Usage:
        machine = AuthSessionMachine(store, provider, issuer, auth_logger, pending_ttl_seconds=600)
        started = await machine.start()
        result = await machine.poll(started.session_id)
        status = await machine.status(started.session_id)
    """

    def __init__(
        self,
        store: "SessionStore",
        provider: "GrandIDClient",
        issuer: "CredentialIssuer",
        auth_logger: "AuthLogger",
        *,
        pending_ttl_seconds: int,
        rate_tracker: "PollRateTracker | None" = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            store: Session store.
            provider: Identity provider client.
            issuer: Credential issuer.
            auth_logger: Audit logger for session lifecycle events.
            pending_ttl_seconds: Pending session lifetime, used for expiresAt.
            rate_tracker: Optional per-session poll spacing tracker.
        """
        self._store = store
        self._provider = provider
        self._issuer = issuer
        self._auth_logger = auth_logger
        self._pending_ttl_seconds = pending_ttl_seconds
        self._rate_tracker = rate_tracker

    async def _load(self, session_id: str) -> Session:
        session = await self._store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _forget(self, session_id: str) -> None:
        if self._rate_tracker is not None:
            self._rate_tracker.cleanup_session(session_id)

    async def start(self, callback_url: str | None = None) -> StartResult:
        """Begin a provider transaction and create a pending session.

        Args:
            callback_url: Optional URL forwarded to the provider.

        Returns:
            StartResult with the new session id and its pending deadline.

        Raises:
            ConfigurationError: If provider credentials are not configured.
            ProviderUnreachableError: If the provider cannot be reached.
            ProviderRejectedError: If the provider refuses the transaction.
        """
        if not self._provider.is_configured:
            raise ConfigurationError("Identity provider credentials are not configured")

        provider_session_id = await self._provider.start_session(callback_url)
        created_at = _utcnow()
        session_id = await self._store.create(provider_session_id)

        self._auth_logger.log_session_started(session_id=session_id)
        return StartResult(
            session_id=session_id,
            expires_at=created_at + timedelta(seconds=self._pending_ttl_seconds),
        )

    async def poll(self, session_id: str) -> PollResult:
        """Advance a session by at most one provider round-trip.

        Raises:
            SessionNotFoundError: If the session is unknown or expired.
            PollRateLimitedError: If polled sooner than the minimum interval.
            ProviderUnreachableError: If the provider cannot be reached.
            IssuanceError: If the identity check succeeded but signing failed.
        """
        session = await self._load(session_id)
        if session.is_terminal:
            return _stored_poll_result(session)

        if self._rate_tracker is not None:
            allowed, retry_after = self._rate_tracker.check(session_id)
            if not allowed:
                raise PollRateLimitedError(session_id, retry_after)

        try:
            outcome = await self._provider.poll_session(session.provider_session_id)
        except ProviderUnreachableError as e:
            self._auth_logger.log_provider_unreachable(session_id=session_id, error=e)
            raise

        if isinstance(outcome, Complete):
            return await self._complete(session_id, outcome)
        if isinstance(outcome, Failed):
            return await self._fail(session_id, outcome.hint_code)
        if isinstance(outcome, NotStarted):
            return PollResult(status=SessionStatus.PENDING, hint_code=NOT_STARTED_HINT_CODE)
        if isinstance(outcome, Pending):
            return PollResult(
                status=SessionStatus.PENDING,
                hint_code=outcome.hint_code,
                qr_image=outcome.qr_image,
            )
        raise TypeError(f"Unhandled provider outcome: {type(outcome).__name__}")

    async def _persist_terminal(self, session_id: str, fields: dict[str, Any]) -> Session | None:
        """Write a terminal state if the session is still pending.

        Returns:
            None if this call won the transition, otherwise the stored
            session as it is now. That is normally the terminal record of
            whoever won, or still pending if the write gave up under
            contention (the caller re-polls).

        Raises:
            SessionNotFoundError: If the session vanished meanwhile.
        """
        fields = {**fields, "completed_at": _utcnow()}
        if await self._store.transition(session_id, SessionStatus.PENDING, fields):
            self._forget(session_id)
            return None
        return await self._load(session_id)

    async def _complete(self, session_id: str, outcome: Complete) -> PollResult:
        try:
            credential = self._issuer.issue(outcome.personal_number)
        except IssuanceError as e:
            self._auth_logger.log_issuance_failed(session_id=session_id, error=e)
            stored = await self._persist_terminal(
                session_id,
                {"status": SessionStatus.FAILED, "failure_reason": ISSUANCE_ERROR},
            )
            if stored is not None:
                return _stored_poll_result(stored)
            raise

        attributes = UserAttributes(
            personal_number=outcome.personal_number,
            name=outcome.name,
            given_name=outcome.given_name,
            surname=outcome.surname,
        )
        stored = await self._persist_terminal(
            session_id,
            {
                "status": SessionStatus.COMPLETE,
                "credential": credential.token,
                "user_attributes": attributes,
            },
        )
        if stored is not None:
            # Another poller persisted first; this credential is discarded
            return _stored_poll_result(stored)

        self._auth_logger.log_session_completed(
            session_id=session_id,
            subject=credential.subject,
            jti=credential.jti,
        )
        return PollResult(status=SessionStatus.COMPLETE)

    async def _fail(self, session_id: str, hint_code: str) -> PollResult:
        stored = await self._persist_terminal(
            session_id,
            {"status": SessionStatus.FAILED, "failure_reason": hint_code},
        )
        if stored is not None:
            return _stored_poll_result(stored)

        self._auth_logger.log_session_failed(session_id=session_id, hint_code=hint_code)
        return PollResult(status=SessionStatus.FAILED, hint_code=hint_code)

    async def status(self, session_id: str) -> StatusResult:
        """Read the stored session state. Never contacts the provider.

        Raises:
            SessionNotFoundError: If the session is unknown or expired.
        """
        session = await self._load(session_id)
        if session.status is SessionStatus.COMPLETE:
            return StatusResult(status=SessionStatus.COMPLETE, credential=session.credential)
        if session.status is SessionStatus.FAILED:
            return StatusResult(status=SessionStatus.FAILED, hint_code=session.failure_reason)
        return StatusResult(status=SessionStatus.PENDING)

    async def cancel(self, session_id: str) -> None:
        """Ask the provider to cancel an outstanding transaction.

        Best-effort and does not touch the stored session; the next poll
        observes the provider's failed state. No-op for terminal sessions.

        Raises:
            SessionNotFoundError: If the session is unknown or expired.
        """
        session = await self._load(session_id)
        if session.is_terminal:
            return
        await self._provider.cancel(session.provider_session_id)
