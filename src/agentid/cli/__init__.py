"""Command-line interface for agentid.

Provides commands for running the service, verifying credentials and
checking configuration.
"""

from .main import cli, main

__all__ = ["cli", "main"]
