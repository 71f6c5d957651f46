"""Authentication audit logger.

Logs session lifecycle events to auth.jsonl:
- Session started (provider transaction created)
- Session completed (credential issued, pseudonymous subject + jti)
- Session failed (provider-reported hint code)
- Issuance failed (identity verified but no credential produced)
- Provider unreachable (transient, session stays pending)

Session ids are hashed before writing. The personal number, names and the
credential never reach this logger - AuthEvent has no fields for them.
"""

from __future__ import annotations

__all__ = [
    "AUTH_LOG_FILENAME",
    "AuthLogger",
    "create_auth_logger",
]

import logging
from pathlib import Path

from agentid.constants import APP_NAME
from agentid.telemetry.models import AuthEvent
from agentid.telemetry.system import get_system_logger
from agentid.utils.logging.logger_setup import setup_jsonl_logger
from agentid.utils.logging.logging_helpers import hash_sensitive_id, serialize_event

AUTH_LOG_FILENAME = "auth.jsonl"


class AuthLogger:
    """Audit logger for session lifecycle events.

    Usage:
        logger = create_auth_logger(log_dir)
        logger.log_session_started(session_id="...")
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _log_event(self, event: AuthEvent) -> None:
        event_data = serialize_event(event)
        if event_data.get("session_id"):
            event_data["session_id"] = hash_sensitive_id(event_data["session_id"])

        level = logging.INFO if event.status != "Failure" else logging.WARNING
        try:
            self._logger.log(level, event_data)
        except Exception as e:
            # Audit trail is best-effort here; the request must still be answered
            get_system_logger().error(
                {
                    "event": "auth_log_write_failed",
                    "message": f"Failed to write auth audit event: {e}",
                    "error_type": type(e).__name__,
                    "auth_event": event_data.get("event_type"),
                }
            )

    def log_session_started(self, *, session_id: str) -> None:
        self._log_event(
            AuthEvent(
                event_type="session_started",
                status="Pending",
                session_id=session_id,
            )
        )

    def log_session_completed(self, *, session_id: str, subject: str, jti: str) -> None:
        """Log successful credential issuance.

        Args:
            session_id: Caller-facing session id (hashed before writing).
            subject: Pseudonymous subject placed in the credential.
            jti: Unique token id of the persisted credential.
        """
        self._log_event(
            AuthEvent(
                event_type="session_completed",
                status="Success",
                session_id=session_id,
                subject=subject,
                jti=jti,
            )
        )

    def log_session_failed(self, *, session_id: str, hint_code: str) -> None:
        self._log_event(
            AuthEvent(
                event_type="session_failed",
                status="Failure",
                session_id=session_id,
                hint_code=hint_code,
            )
        )

    def log_issuance_failed(self, *, session_id: str, error: Exception) -> None:
        self._log_event(
            AuthEvent(
                event_type="issuance_failed",
                status="Failure",
                session_id=session_id,
                error_type=type(error).__name__,
                error_message=str(error),
            )
        )

    def log_provider_unreachable(self, *, session_id: str, error: Exception) -> None:
        self._log_event(
            AuthEvent(
                event_type="provider_unreachable",
                status="Pending",
                session_id=session_id,
                error_type=type(error).__name__,
                error_message=str(error),
                message="Provider poll failed, session remains pending",
            )
        )


def create_auth_logger(log_dir: Path | None = None) -> AuthLogger:
    """Create the auth audit logger.

    Args:
        log_dir: Directory for auth.jsonl. If None, events are discarded
            (console-only deployments rely on the system logger).

    Returns:
        AuthLogger instance.
    """
    log_file = log_dir / AUTH_LOG_FILENAME if log_dir is not None else None
    logger = setup_jsonl_logger(f"{APP_NAME}.audit.auth", log_file)
    return AuthLogger(logger)
