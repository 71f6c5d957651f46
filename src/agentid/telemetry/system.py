"""System logger for operational events.

This module provides a singleton system logger for operational events that
aren't part of the audit trail (provider transport failures, config
problems, unexpected response shapes).

Logging strategy:
- Console (stderr): INFO and above by default (operator sees everything)
- File (system.jsonl): Only issues (WARNING, ERROR, CRITICAL)

The file handler is configured separately via configure_system_logger()
once the log_dir from config is available.
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "configure_system_logger",
    "get_system_logger",
]

import logging
import sys
from pathlib import Path

from agentid.constants import APP_NAME
from agentid.utils.logging.iso_formatter import ISO8601Formatter

SYSTEM_LOG_FILENAME = "system.jsonl"


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output.

    Extracts 'message' or 'event' field from dict messages for cleaner stderr output.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human-readable console output."""
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
            return f"{record.levelname}: {msg}"
        return f"{record.levelname}: {record.getMessage()}"


_system_logger: logging.Logger | None = None
_file_handler: logging.FileHandler | None = None


def get_system_logger() -> logging.Logger:
    """Get the singleton system logger instance.

    Creates the logger on first call with stderr handler only.

    Returns:
        logging.Logger: Configured system logger instance.

    Example:
        >>> logger = get_system_logger()
        >>> logger.warning({"event": "provider_unreachable", "message": "..."})
    """
    global _system_logger

    if _system_logger is not None:
        return _system_logger

    _system_logger = logging.getLogger(f"{APP_NAME}.system")
    _system_logger.setLevel(logging.DEBUG)
    _system_logger.propagate = False

    for handler in _system_logger.handlers:
        handler.close()
    _system_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.INFO)
    stderr_handler.setFormatter(ConsoleFormatter())
    _system_logger.addHandler(stderr_handler)

    return _system_logger


def configure_system_logger(level: str = "INFO", log_dir: Path | None = None) -> None:
    """Apply console level and optionally add the system.jsonl file handler.

    Safe to call more than once; the file handler is replaced, not duplicated.

    Args:
        level: Console log level name.
        log_dir: Directory for system.jsonl. Console only if None.
    """
    global _file_handler

    logger = get_system_logger()
    for handler in logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)

    if log_dir is None:
        return

    if _file_handler is not None:
        logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(
            {
                "event": "log_dir_unavailable",
                "message": f"Cannot create log directory {log_dir}, logging to console only: {e}",
            }
        )
        return

    _file_handler = logging.FileHandler(log_dir / SYSTEM_LOG_FILENAME, mode="a", encoding="utf-8")
    _file_handler.setLevel(logging.WARNING)
    _file_handler.setFormatter(ISO8601Formatter())
    logger.addHandler(_file_handler)
