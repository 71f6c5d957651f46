"""Security controls for the HTTP surface.

- rate_limiter: per-session poll spacing (provider forbids polling faster than 2s)
"""

from agentid.security.rate_limiter import PollRateTracker, create_rate_tracker

__all__ = [
    "PollRateTracker",
    "create_rate_tracker",
]
