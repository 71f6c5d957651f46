"""Verify command for agentid CLI.

Fetches a published key set and verifies a credential offline, the way a
relying party would.
"""

from __future__ import annotations

__all__ = ["verify"]

import sys

import click
import httpx

from agentid.constants import DEFAULT_ISSUER, DEFAULT_SIGNING_ALGORITHM
from agentid.exceptions import CredentialVerificationError
from agentid.issuance.verifier import CredentialVerifier

from ..styling import style_error, style_label, style_success

# Fail fast if the key set host is unreachable
JWKS_FETCH_TIMEOUT_SECONDS = 5.0


def _fetch_jwks(url: str) -> dict:
    """Fetch a JWKS document.

    Raises:
        click.ClickException: If the key set cannot be fetched or parsed.
    """
    try:
        response = httpx.get(url, timeout=JWKS_FETCH_TIMEOUT_SECONDS, follow_redirects=True)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        raise click.ClickException(f"Key set endpoint returned HTTP {e.response.status_code}: {url}") from e
    except httpx.HTTPError as e:
        raise click.ClickException(f"Cannot reach key set endpoint {url}: {type(e).__name__}") from e
    except ValueError as e:
        raise click.ClickException(f"Key set at {url} is not valid JSON") from e

    if not isinstance(data, dict):
        raise click.ClickException(f"Key set at {url} is not a JSON object")
    return data


@click.command()
@click.argument("token")
@click.option("--jwks-url", required=True, help="URL of the published key set (/jwks)")
@click.option("--issuer", default=DEFAULT_ISSUER, show_default=True, help="Expected 'iss' claim")
@click.option(
    "--algorithm",
    default=DEFAULT_SIGNING_ALGORITHM,
    show_default=True,
    help="The only accepted signing algorithm",
)
def verify(token: str, jwks_url: str, issuer: str, algorithm: str) -> None:
    """Verify a credential against a published key set.

    Prints the pseudonymous subject and expiry. Exits 1 on rejection.
    """
    jwks = _fetch_jwks(jwks_url)

    try:
        verifier = CredentialVerifier(jwks, issuer=issuer, algorithm=algorithm)
        result = verifier.verify(token)
    except CredentialVerificationError as e:
        click.echo(style_error(f"Credential rejected: {e}"), err=True)
        sys.exit(1)

    click.echo(style_success("Credential valid"))
    click.echo(f"  {style_label('Subject')} {result.subject}")
    click.echo(f"  {style_label('Auth method')} {result.auth_method or '-'}")
    click.echo(f"  {style_label('Issued at')} {result.issued_at.isoformat()}")
    click.echo(f"  {style_label('Expires at')} {result.expires_at.isoformat()}")
    click.echo(f"  {style_label('Token id')} {result.jti}")
