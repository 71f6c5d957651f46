"""Poll rate limiting per session.

The identity provider forbids polling one transaction more than once
every 2 seconds. PollRateTracker enforces that spacing on the inbound
poll endpoint so a misbehaving caller cannot push us over the provider's
limit: a poll arriving too soon is rejected without a provider round-trip.

The tracker is process-local. Behind a load balancer each instance keeps
its own view, so the effective limit is per instance.

Usage:
    tracker = PollRateTracker(min_interval_seconds=2.0)

    allowed, retry_after = tracker.check(session_id)
    if not allowed:
        # Reject with 429 and Retry-After
        ...

    # Forget the session once it is terminal
    tracker.cleanup_session(session_id)
"""

from __future__ import annotations

__all__ = [
    "PollRateTracker",
    "create_rate_tracker",
]

import math
from dataclasses import dataclass, field
from time import monotonic
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from agentid.config import AppConfig

# Entries older than this are pruned once the table grows past _PRUNE_THRESHOLD
_STALE_AFTER_SECONDS: float = 3600.0
_PRUNE_THRESHOLD: int = 1024


@dataclass(slots=True)
class PollRateTracker:
    """Track the last admitted provider poll per session.

    Thread-safety: NOT thread-safe. Used from a single event loop where
    check() never awaits, so no locking is needed.

    Attributes:
        min_interval_seconds: Minimum spacing between admitted polls.
    """

    min_interval_seconds: float = 2.0
    clock: Callable[[], float] = monotonic

    # Internal state: {session_id: last admitted timestamp}
    _last_poll: dict[str, float] = field(default_factory=dict)

    def check(self, session_id: str) -> tuple[bool, int]:
        """Admit or reject a poll.

        Args:
            session_id: Session being polled.

        Returns:
            Tuple of (is_allowed, retry_after_seconds).
            retry_after_seconds is 0 when allowed, otherwise a whole number
            of seconds (at least 1) until the next poll would be admitted.
        """
        now = self.clock()

        if len(self._last_poll) > _PRUNE_THRESHOLD:
            self._prune(now)

        last = self._last_poll.get(session_id)
        if last is not None:
            elapsed = now - last
            if elapsed < self.min_interval_seconds:
                return False, max(1, math.ceil(self.min_interval_seconds - elapsed))

        self._last_poll[session_id] = now
        return True, 0

    def _prune(self, now: float) -> None:
        cutoff = now - _STALE_AFTER_SECONDS
        for session_id in [s for s, t in self._last_poll.items() if t < cutoff]:
            del self._last_poll[session_id]

    def cleanup_session(self, session_id: str) -> None:
        """Remove tracking data for a session that reached a terminal state."""
        self._last_poll.pop(session_id, None)

    def clear(self) -> None:
        """Clear all tracking data."""
        self._last_poll.clear()

    @property
    def active_sessions(self) -> int:
        """Number of sessions currently being tracked."""
        return len(self._last_poll)


def create_rate_tracker(config: "AppConfig") -> PollRateTracker | None:
    """Create the poll rate tracker from config.

    Returns:
        PollRateTracker, or None when min_poll_interval_seconds is 0.
    """
    interval = config.api.min_poll_interval_seconds
    if interval <= 0:
        return None
    return PollRateTracker(min_interval_seconds=interval)
