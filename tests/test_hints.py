"""Tests for hint code guidance text."""

from __future__ import annotations

import pytest

from agentid.hints import DEFAULT_HINT_MESSAGE, HINT_MESSAGES, hint_message


class TestHintMessage:
    """Tests for hint_message."""

    @pytest.mark.parametrize(
        "code",
        [
            "outstandingTransaction",
            "noClient",
            "started",
            "userSign",
            "startFailed",
            "userCancel",
            "cancelled",
            "expiredTransaction",
            "certificateErr",
            "ISSUANCE_ERROR",
        ],
    )
    def test_known_codes_have_specific_text(self, code):
        """Every documented code maps to its own guidance."""
        assert hint_message(code) == HINT_MESSAGES[code]
        assert hint_message(code) != DEFAULT_HINT_MESSAGE

    @pytest.mark.parametrize("code", [None, "", "somethingNew"])
    def test_unknown_or_missing_uses_default(self, code):
        """Unknown and missing codes fall back to the generic instruction."""
        assert hint_message(code) == DEFAULT_HINT_MESSAGE
