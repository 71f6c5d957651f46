"""Normalized identity-provider outcomes.

GetSession answers with one of several JSON shapes that are told apart
by which fields are present, not by a tag. classify_session_response()
is the only place those shapes are inspected; everything downstream
works with the closed set below:

    Pending     transaction outstanding (hint code + refreshed QR image)
    Complete    identity attributes released
    Failed      transaction terminated (user cancel, timeout, cert error...)
    NotStarted  user has not opened the interactive step yet
"""

from __future__ import annotations

__all__ = [
    "Complete",
    "Failed",
    "NotStarted",
    "Outcome",
    "Pending",
    "classify_session_response",
]

from dataclasses import dataclass, field
from typing import Any, Union

from agentid.telemetry.system import get_system_logger

# errorObject.code meaning "no transaction has begun yet"
_NOT_LOGGED_IN = "NOTLOGGEDIN"


@dataclass(frozen=True, slots=True)
class Pending:
    """Transaction outstanding.

    Attributes:
        hint_code: Provider guidance code, None if the provider sent none.
        qr_image: Base64 QR image; refreshed on every poll.
    """

    hint_code: str | None = None
    qr_image: str | None = None


@dataclass(frozen=True, slots=True)
class Complete:
    """Identity check succeeded. personal_number never leaves the service."""

    personal_number: str = field(repr=False)
    name: str = ""
    given_name: str = ""
    surname: str = ""


@dataclass(frozen=True, slots=True)
class Failed:
    """Transaction terminated unsuccessfully."""

    hint_code: str


@dataclass(frozen=True, slots=True)
class NotStarted:
    """User has not started the interactive step. Treated as Pending."""


Outcome = Union[Pending, Complete, Failed, NotStarted]


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def classify_session_response(payload: Any) -> Outcome:
    """Classify a GetSession payload into exactly one Outcome.

    Precedence follows the provider's shapes: released attributes win,
    then the BankID message status, then the not-logged-in error. Any
    other shape is reported as Pending with no hint so a poller keeps
    waiting instead of failing a transaction the provider still holds.

    Args:
        payload: Decoded JSON body of a GetSession response.

    Returns:
        One of Pending, Complete, Failed, NotStarted.
    """
    data = _as_dict(payload)

    attributes = data.get("userAttributes")
    if isinstance(attributes, dict) and attributes.get("personalNumber"):
        return Complete(
            personal_number=str(attributes["personalNumber"]),
            name=str(attributes.get("name") or ""),
            given_name=str(attributes.get("givenName") or ""),
            surname=str(attributes.get("surname") or ""),
        )

    grandid_object = _as_dict(data.get("grandidObject"))
    message = _as_dict(grandid_object.get("message"))
    status = message.get("status")
    hint_code = message.get("hintCode")

    if status == "failed":
        return Failed(hint_code=str(hint_code or "unknown"))
    if status == "pending":
        return Pending(hint_code=hint_code, qr_image=grandid_object.get("QRCode"))

    error_object = _as_dict(data.get("errorObject"))
    if error_object.get("code") == _NOT_LOGGED_IN:
        return NotStarted()

    get_system_logger().warning(
        {
            "event": "provider_response_unrecognized",
            "message": "Unrecognized GetSession response shape, treating as pending",
            "keys": sorted(data.keys()),
            "error_code": error_object.get("code"),
        }
    )
    return Pending()
