"""Main CLI entry point for agentid.

Commands:
    serve   - Run the HTTP service
    verify  - Verify a credential offline against a published key set
    config  - Configuration checks

Subcommand help:
    agentid COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli"]

import sys

import click

from agentid import __version__

from .commands.config import config
from .commands.serve import serve
from .commands.verify import verify


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Quick Start:
  export GRANDID_API_KEY=... GRANDID_SERVICE_KEY=...
  export JWT_PRIVATE_KEY="$(cat private.pem)" JWT_HMAC_SECRET=...
  agentid config check             Confirm required secrets are present
  agentid serve --port 8000        Run the service

Verify a credential:
  agentid verify <token> --jwks-url https://agentid.example.com/jwks
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """agentid: BankID-backed pseudonymous credentials for AI agents."""
    if version:
        click.echo(f"agentid {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(config)
cli.add_command(serve)
cli.add_command(verify)


def main() -> None:
    """CLI entry point."""
    cli()
