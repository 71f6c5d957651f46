"""Tests for the auth audit logger."""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

from agentid.exceptions import IssuanceError
from agentid.telemetry.auth_logger import AUTH_LOG_FILENAME, AuthLogger, create_auth_logger
from agentid.utils.logging.logging_helpers import hash_sensitive_id


def _read_events(log_dir) -> list[dict]:
    lines = (log_dir / AUTH_LOG_FILENAME).read_text().splitlines()
    return [json.loads(line) for line in lines]


class TestAuthLogger:
    """Events written to auth.jsonl."""

    def test_session_started(self, tmp_path):
        """Start events are INFO with a hashed session id."""
        logger = create_auth_logger(tmp_path)

        logger.log_session_started(session_id="session-abc")

        [event] = _read_events(tmp_path)
        assert event["event_type"] == "session_started"
        assert event["status"] == "Pending"
        assert event["level"] == "INFO"
        assert event["session_id"] == hash_sensitive_id("session-abc")
        assert "session-abc" not in json.dumps(event)
        assert event["time"].endswith("Z")

    def test_session_completed_records_subject_and_jti(self, tmp_path):
        """Completion records the pseudonymous subject and token id."""
        logger = create_auth_logger(tmp_path)

        logger.log_session_completed(session_id="s", subject="abc123", jti="jti-1")

        [event] = _read_events(tmp_path)
        assert event["event_type"] == "session_completed"
        assert event["status"] == "Success"
        assert event["subject"] == "abc123"
        assert event["jti"] == "jti-1"

    def test_failures_logged_as_warning(self, tmp_path):
        """Failed sessions and issuance failures are WARNING."""
        logger = create_auth_logger(tmp_path)

        logger.log_session_failed(session_id="s", hint_code="userCancel")
        logger.log_issuance_failed(session_id="s", error=IssuanceError("no key"))

        failed, issuance = _read_events(tmp_path)
        assert failed["level"] == "WARNING"
        assert failed["hint_code"] == "userCancel"
        assert issuance["event_type"] == "issuance_failed"
        assert issuance["error_type"] == "IssuanceError"
        assert issuance["error_message"] == "no key"

    def test_provider_unreachable_is_pending(self, tmp_path):
        """Transport failures are recorded without failing the session."""
        logger = create_auth_logger(tmp_path)

        logger.log_provider_unreachable(session_id="s", error=TimeoutError("slow"))

        [event] = _read_events(tmp_path)
        assert event["status"] == "Pending"
        assert event["level"] == "INFO"
        assert event["error_type"] == "TimeoutError"

    def test_none_fields_omitted(self, tmp_path):
        """Unset fields are not written."""
        logger = create_auth_logger(tmp_path)

        logger.log_session_started(session_id="s")

        [event] = _read_events(tmp_path)
        assert "subject" not in event
        assert "jti" not in event

    def test_without_log_dir_discards(self, tmp_path):
        """No log_dir means no file is written."""
        logger = create_auth_logger(None)

        logger.log_session_started(session_id="s")

        assert not list(tmp_path.iterdir())

    def test_write_failure_does_not_raise(self):
        """A broken handler is reported to the system logger, not the caller."""
        broken = MagicMock(spec=logging.Logger)
        broken.log.side_effect = OSError("disk full")

        AuthLogger(broken).log_session_started(session_id="s")
