"""Tests for per-session poll rate limiting."""

from __future__ import annotations

import pytest

from agentid.config import AppConfig
from agentid.security.rate_limiter import PollRateTracker, create_rate_tracker


@pytest.fixture
def tracker(clock) -> PollRateTracker:
    return PollRateTracker(min_interval_seconds=2.0, clock=clock)


class TestPollRateTracker:
    """Tests for PollRateTracker."""

    def test_first_poll_allowed(self, tracker):
        """The first poll of a session is admitted."""
        assert tracker.check("s1") == (True, 0)

    def test_poll_inside_interval_rejected(self, tracker, clock):
        """A poll sooner than the interval is rejected with whole-second retry."""
        tracker.check("s1")
        clock.advance(1.2)

        allowed, retry_after = tracker.check("s1")

        assert allowed is False
        assert retry_after == 1

    def test_retry_after_at_least_one(self, tracker, clock):
        """retry_after never rounds down to zero."""
        tracker.check("s1")
        clock.advance(1.99)

        assert tracker.check("s1") == (False, 1)

    def test_poll_after_interval_allowed(self, tracker, clock):
        """Exactly the interval later the poll is admitted."""
        tracker.check("s1")
        clock.advance(2.0)

        assert tracker.check("s1") == (True, 0)

    def test_rejection_does_not_reset_window(self, tracker, clock):
        """Rejected polls do not push the next admission further out."""
        tracker.check("s1")
        clock.advance(1.0)
        tracker.check("s1")
        clock.advance(1.0)

        assert tracker.check("s1") == (True, 0)

    def test_sessions_are_independent(self, tracker):
        """Each session has its own window."""
        tracker.check("s1")

        assert tracker.check("s2") == (True, 0)

    def test_cleanup_session(self, tracker):
        """cleanup_session forgets a session."""
        tracker.check("s1")
        tracker.cleanup_session("s1")

        assert tracker.active_sessions == 0
        assert tracker.check("s1") == (True, 0)

    def test_cleanup_unknown_is_noop(self, tracker):
        """Forgetting an unknown session is harmless."""
        tracker.cleanup_session("missing")

        assert tracker.active_sessions == 0

    def test_clear(self, tracker):
        """clear() forgets everything."""
        tracker.check("s1")
        tracker.check("s2")

        tracker.clear()

        assert tracker.active_sessions == 0

    def test_stale_entries_pruned_when_table_grows(self, tracker, clock):
        """Old entries are dropped once the table is large."""
        for i in range(1100):
            tracker.check(f"old-{i}")
        clock.advance(3601)

        tracker.check("fresh")

        assert tracker.active_sessions == 1


class TestCreateRateTracker:
    """Tests for create_rate_tracker."""

    def test_uses_configured_interval(self):
        """The tracker takes its interval from config."""
        tracker = create_rate_tracker(AppConfig())

        assert tracker is not None
        assert tracker.min_interval_seconds == 2.0

    def test_zero_interval_disables(self):
        """An interval of 0 disables rate limiting."""
        config = AppConfig.model_validate({"api": {"min_poll_interval_seconds": 0}})

        assert create_rate_tracker(config) is None
