"""User guidance for provider hint codes.

Maps BankID hint codes (and the internal ISSUANCE_ERROR reason) to the
text shown on the interactive page. Unknown or missing codes get the
generic instruction.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_HINT_MESSAGE",
    "HINT_MESSAGES",
    "hint_message",
]

from agentid.constants import ISSUANCE_ERROR

DEFAULT_HINT_MESSAGE = "Follow the instructions in your BankID app."

HINT_MESSAGES: dict[str, str] = {
    "outstandingTransaction": "Open BankID on your phone and scan the QR code below.",
    "noClient": "Open BankID on your phone and scan the QR code below.",
    "started": "BankID is starting…",
    "userSign": "Enter your PIN or use biometrics in BankID.",
    "startFailed": "BankID did not start in time. Please try again.",
    "userCancel": "You cancelled the BankID authentication.",
    "cancelled": "The authentication was cancelled. Please try again.",
    "expiredTransaction": "The session has expired. Please try again.",
    "certificateErr": "Certificate error in BankID. Please contact support.",
    ISSUANCE_ERROR: "An internal error occurred while issuing your certificate.",
}


def hint_message(hint_code: str | None) -> str:
    """Guidance text for a hint code."""
    if not hint_code:
        return DEFAULT_HINT_MESSAGE
    return HINT_MESSAGES.get(hint_code, DEFAULT_HINT_MESSAGE)
