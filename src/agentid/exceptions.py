"""Custom exceptions for agentid.

This module contains all custom exceptions used throughout the package.
Every exception is recovered at the HTTP boundary (see api/errors.py) into a
structured error payload - none of them is allowed to crash the process.

Session errors:
    - SessionNotFoundError: Session id unknown or expired (indistinguishable)
    - PollRateLimitedError: Session polled faster than the provider allows

Identity provider errors:
    - ProviderUnreachableError: Transient transport failure, retryable, never persisted
    - ProviderRejectedError: Provider refused to start a transaction

Issuance errors:
    - IssuanceError: Signing or key material failure after a successful identity check
    - CredentialVerificationError: Credential rejected by offline verification

Configuration errors:
    - ConfigurationError: Required credentials, keys or config file invalid/absent

Usage:
    from agentid.exceptions import ProviderUnreachableError, IssuanceError
"""

from __future__ import annotations

__all__ = [
    "AgentIDError",
    "ConfigurationError",
    "CredentialVerificationError",
    "IssuanceError",
    "PollRateLimitedError",
    "ProviderRejectedError",
    "ProviderUnreachableError",
    "SessionNotFoundError",
]


class AgentIDError(Exception):
    """Base exception for agentid.

    Attributes:
        failure_type: Category string for logging.
    """

    failure_type: str = "unknown"


class SessionNotFoundError(AgentIDError):
    """Session id is unknown or its TTL has lapsed.

    Both causes surface identically - callers never learn whether a
    session existed and expired or never existed at all.
    """

    failure_type = "session_not_found"

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__("Session not found or expired.")


class ProviderUnreachableError(AgentIDError):
    """The identity provider could not be reached.

    Raised on network/transport failures, timeouts and unparseable
    responses. This is a local networking problem, not a rejected
    identity check: the session stays pending and the caller may re-poll.
    """

    failure_type = "provider_unreachable"


class ProviderRejectedError(AgentIDError):
    """The identity provider refused the request.

    Raised when starting a transaction returns an error object instead
    of a session id (bad credentials, provider-side validation, etc.).

    Attributes:
        code: Provider error code (e.g., "INVALID_APIKEY").
    """

    failure_type = "provider_rejected"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        self.code = code
        super().__init__(message)


class IssuanceError(AgentIDError):
    """Credential could not be produced.

    Raised when key material is missing or unparseable, or signing fails.
    The underlying identity check succeeded, so this is persisted as the
    ISSUANCE_ERROR failure reason rather than a provider failure.
    """

    failure_type = "issuance_error"


class ConfigurationError(AgentIDError):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file contains invalid JSON
    - Config file fails Pydantic validation
    - Provider credentials are absent at the entry point that needs them
    """

    failure_type = "configuration_failure"


class CredentialVerificationError(AgentIDError):
    """A credential failed offline verification.

    Raised for a wrong algorithm, unknown key id, issuer mismatch,
    expired token or invalid signature.
    """

    failure_type = "credential_rejected"


class PollRateLimitedError(AgentIDError):
    """A session was polled sooner than the provider's minimum interval.

    Attributes:
        retry_after: Whole seconds until the next poll would be admitted.
    """

    failure_type = "poll_rate_limited"

    def __init__(self, session_id: str, retry_after: int) -> None:
        self.session_id = session_id
        self.retry_after = retry_after
        super().__init__(f"Polling too fast; retry after {retry_after}s.")
