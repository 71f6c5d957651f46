"""Config command group for agentid CLI.

Reports which settings are in effect and which required secrets are
present. Secret values are never printed.
"""

from __future__ import annotations

__all__ = ["config"]

import sys
from pathlib import Path

import click

from agentid.config import AppConfig, get_default_config_path, load_config
from agentid.exceptions import ConfigurationError, IssuanceError
from agentid.issuance.keys import load_signing_keys

from ..styling import style_error, style_header, style_success, style_warning


def _present(value: str | None) -> str:
    if value:
        return click.style("set", fg="green")
    return click.style("missing", fg="red")


def _check_signing(app_config: AppConfig) -> str | None:
    """Parse key material. Returns an error message, or None if usable."""
    try:
        load_signing_keys(app_config.signing)
    except IssuanceError as e:
        return str(e)
    if not app_config.signing.hmac_secret:
        return "Subject HMAC secret is not configured (JWT_HMAC_SECRET)"
    return None


@click.group()
def config() -> None:
    """Configuration commands."""
    pass


@config.command("check")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: OS config dir)",
)
def config_check(config_path: Path | None) -> None:
    """Validate configuration and report required secrets.

    Exits 1 if the configuration is invalid or a required secret is missing.
    """
    try:
        app_config = load_config(config_path)
    except ConfigurationError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    click.echo(f"\nConfig file: {config_path or get_default_config_path()}\n")

    click.echo(style_header("Identity provider"))
    click.echo(f"  base_url: {app_config.provider.base_url}")
    click.echo(f"  api_key: {_present(app_config.provider.api_key)}")
    click.echo(f"  service_key: {_present(app_config.provider.service_key)}")
    click.echo()

    click.echo(style_header("Signing"))
    click.echo(f"  private_key: {_present(app_config.signing.private_key_pem)}")
    click.echo(f"  public_key: {_present(app_config.signing.public_key_pem)}")
    click.echo(f"  hmac_secret: {_present(app_config.signing.hmac_secret)}")
    click.echo(f"  issuer: {app_config.signing.issuer}  kid: {app_config.signing.key_id}")
    click.echo(f"  token_ttl_seconds: {app_config.signing.token_ttl_seconds}")
    click.echo()

    click.echo(style_header("Session store"))
    backend = "redis" if app_config.store.redis_url else "memory"
    click.echo(f"  backend: {backend}")
    click.echo(f"  pending_ttl_seconds: {app_config.store.pending_ttl_seconds}")
    click.echo()

    problems: list[str] = []
    if not app_config.provider.is_configured:
        problems.append("Provider credentials missing (GRANDID_API_KEY, GRANDID_SERVICE_KEY)")
    signing_error = _check_signing(app_config)
    if signing_error:
        problems.append(signing_error)

    if backend == "memory":
        click.echo(style_warning("In-memory session store: single instance only, not durable"))

    if problems:
        for problem in problems:
            click.echo(style_error(problem), err=True)
        sys.exit(1)

    click.echo(style_success("Configuration is complete"))
