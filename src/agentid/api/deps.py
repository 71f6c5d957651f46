"""Shared dependencies for API routes.

Components are built once at startup (see agentid.app) and stored on
app.state. Routes read them through the Annotated aliases below, which
raise 503 if a component was never registered.

Usage:
    from agentid.api.deps import MachineDep

    @router.get("/status")
    async def get_status(machine: MachineDep) -> ...:
        ...
"""

from __future__ import annotations

__all__ = [
    # Dependency functions
    "get_config",
    "get_issuer",
    "get_machine",
    # Type aliases for Annotated pattern
    "ConfigDep",
    "IssuerDep",
    "MachineDep",
]

from typing import TYPE_CHECKING, Annotated, Any, Callable

from fastapi import Depends, Request

from agentid.api.errors import APIError, ErrorCode

if TYPE_CHECKING:
    from agentid.config import AppConfig
    from agentid.issuance.issuer import CredentialIssuer
    from agentid.sessions.machine import AuthSessionMachine


def _create_state_getter(attr_name: str, type_hint: str) -> Callable[[Request], Any]:
    """Create a dependency that reads attr_name from app.state, 503 if absent."""

    def getter(request: Request) -> Any:
        value = getattr(request.app.state, attr_name, None)
        if value is None:
            raise APIError(
                status_code=503,
                code=ErrorCode.SERVICE_UNAVAILABLE,
                message=f"{type_hint} not available. Service may still be starting.",
            )
        return value

    getter.__name__ = f"get_{attr_name}"
    getter.__doc__ = f"Get {type_hint} from app.state.\n\nRaises APIError 503 if not available."
    return getter


get_config: Callable[[Request], "AppConfig"] = _create_state_getter("config", "AppConfig")

get_machine: Callable[[Request], "AuthSessionMachine"] = _create_state_getter(
    "machine",
    "AuthSessionMachine",
)

get_issuer: Callable[[Request], "CredentialIssuer"] = _create_state_getter(
    "issuer",
    "CredentialIssuer",
)


ConfigDep = Annotated["AppConfig", Depends(get_config)]
MachineDep = Annotated["AuthSessionMachine", Depends(get_machine)]
IssuerDep = Annotated["CredentialIssuer", Depends(get_issuer)]
