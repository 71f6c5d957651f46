"""Logging helper utilities.

Provides generic utilities for telemetry logging:
- Event serialization (model_dump with consistent options)
- Sensitive id hashing for log correlation without exposure
"""

from __future__ import annotations

__all__ = [
    "hash_sensitive_id",
    "serialize_event",
]

import hashlib
from typing import Any

from pydantic import BaseModel


def serialize_event(event: BaseModel) -> dict[str, Any]:
    """Serialize a Pydantic event model for JSONL logging.

    - Excludes the 'time' field (added by ISO8601Formatter at log time)
    - Excludes None values for cleaner logs
    - Uses JSON mode so datetimes and enums become strings

    Args:
        event: Pydantic model instance (e.g., AuthEvent).

    Returns:
        dict: Serialized event data ready for logging.
    """
    return event.model_dump(mode="json", exclude={"time"}, exclude_none=True)


def hash_sensitive_id(value: str, prefix_length: int = 8) -> str:
    """Hash a sensitive ID for logging while preserving some identifiability.

    Session ids double as bearer references for the status endpoint, so
    they are never written to logs in full. The hash is deterministic,
    so the same session correlates across log lines.

    Args:
        value: The sensitive ID to hash.
        prefix_length: Number of hex characters to keep (default: 8).

    Returns:
        str: Hashed value in format "sha256:<prefix>" (e.g., "sha256:a1b2c3d4").
    """
    if not value:
        return "sha256:empty"

    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()
    return f"sha256:{digest[:prefix_length]}"
