"""Logging utilities and helpers.

This package provides logging infrastructure for agentid:
- iso_formatter: ISO 8601 timestamp formatting for JSONL logs
- logging_helpers: Event serialization and sensitive id hashing

Import directly from submodules:
    from agentid.utils.logging.iso_formatter import ISO8601Formatter
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
