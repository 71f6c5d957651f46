"""Identity provider (GrandID BankID gateway) integration."""

from agentid.provider.client import GrandIDClient
from agentid.provider.outcomes import (
    Complete,
    Failed,
    NotStarted,
    Outcome,
    Pending,
    classify_session_response,
)

__all__ = [
    "Complete",
    "Failed",
    "GrandIDClient",
    "NotStarted",
    "Outcome",
    "Pending",
    "classify_session_response",
]
