"""Telemetry for agentid.

- system: operational logger (stderr + optional system.jsonl)
- auth_logger: session lifecycle audit trail (auth.jsonl)
- models: Pydantic models for audit events
"""

from agentid.telemetry.auth_logger import AuthLogger, create_auth_logger
from agentid.telemetry.system import configure_system_logger, get_system_logger

__all__ = [
    "AuthLogger",
    "configure_system_logger",
    "create_auth_logger",
    "get_system_logger",
]
