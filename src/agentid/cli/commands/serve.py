"""Serve command for agentid CLI.

Loads configuration (file + environment), configures logging and runs
the FastAPI app under uvicorn.
"""

from __future__ import annotations

__all__ = ["serve"]

import sys
from pathlib import Path

import click
import uvicorn

from agentid.app import configure_logging, create_api_app
from agentid.config import load_config
from agentid.constants import DEFAULT_API_HOST, DEFAULT_API_PORT
from agentid.exceptions import ConfigurationError

from ..styling import style_error


@click.command()
@click.option("--host", default=DEFAULT_API_HOST, show_default=True, help="Bind address")
@click.option("--port", default=DEFAULT_API_PORT, show_default=True, type=int, help="Bind port")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: OS config dir)",
)
def serve(host: str, port: int, config_path: Path | None) -> None:
    """Run the agentid HTTP service.

    Secrets come from the environment (GRANDID_*, JWT_*, REDIS_URL).
    Without REDIS_URL the in-memory store is used: single instance only.
    """
    try:
        app_config = load_config(config_path)
    except ConfigurationError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    configure_logging(app_config)
    app = create_api_app(app_config)

    # log_config=None keeps uvicorn from replacing our logging handlers
    uvicorn.run(app, host=host, port=port, log_config=None)
