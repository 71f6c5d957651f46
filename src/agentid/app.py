"""Application wiring.

build_components() constructs every long-lived collaborator once, from
configuration, and hands each its dependencies explicitly:

    store        MemorySessionStore | RedisSessionStore (by store.redis_url)
    provider     GrandIDClient (pooled httpx.AsyncClient)
    issuer       CredentialIssuer (keys parsed lazily on first use)
    rate_tracker PollRateTracker (process-local)
    auth_logger  AuthLogger (auth.jsonl when log_dir is set)
    machine      AuthSessionMachine composing the above

create_app() is the uvicorn factory: it loads configuration, configures
logging and returns the FastAPI app.
"""

from __future__ import annotations

__all__ = [
    "AppComponents",
    "build_components",
    "create_api_app",
    "create_app",
]

from dataclasses import dataclass
from pathlib import Path

from fastapi import FastAPI

from agentid.api.server import create_api_app
from agentid.config import AppConfig, load_config
from agentid.issuance.issuer import CredentialIssuer
from agentid.provider.client import GrandIDClient
from agentid.security.rate_limiter import PollRateTracker, create_rate_tracker
from agentid.sessions.machine import AuthSessionMachine
from agentid.sessions.store import SessionStore, create_session_store
from agentid.telemetry import AuthLogger, configure_system_logger, create_auth_logger, get_system_logger


@dataclass
class AppComponents:
    """Long-lived service components shared by all requests."""

    store: SessionStore
    provider: GrandIDClient
    issuer: CredentialIssuer
    auth_logger: AuthLogger
    machine: AuthSessionMachine
    rate_tracker: PollRateTracker | None = None

    async def aclose(self) -> None:
        """Release network resources (provider HTTP pool, store connection)."""
        try:
            await self.provider.aclose()
        finally:
            await self.store.close()


def build_components(config: AppConfig) -> AppComponents:
    """Construct all components from configuration.

    Missing provider credentials or key material do not fail here; they
    fail at the entry point that needs them.
    """
    log_dir = Path(config.logging.log_dir).expanduser() if config.logging.log_dir else None

    store = create_session_store(config)
    provider = GrandIDClient(config.provider)
    issuer = CredentialIssuer(config.signing)
    auth_logger = create_auth_logger(log_dir)
    rate_tracker = create_rate_tracker(config)

    machine = AuthSessionMachine(
        store,
        provider,
        issuer,
        auth_logger,
        pending_ttl_seconds=config.store.pending_ttl_seconds,
        rate_tracker=rate_tracker,
    )

    if not provider.is_configured:
        get_system_logger().warning(
            {
                "event": "provider_not_configured",
                "message": "GRANDID_API_KEY/GRANDID_SERVICE_KEY not set - /auth/start will return 503",
            }
        )

    return AppComponents(
        store=store,
        provider=provider,
        issuer=issuer,
        auth_logger=auth_logger,
        machine=machine,
        rate_tracker=rate_tracker,
    )


def configure_logging(config: AppConfig) -> None:
    """Apply logging configuration to the system logger."""
    log_dir = Path(config.logging.log_dir).expanduser() if config.logging.log_dir else None
    configure_system_logger(level=config.logging.level, log_dir=log_dir)


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Uvicorn factory: load config (file + environment) and build the app.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    if config is None:
        config = load_config()
    configure_logging(config)
    return create_api_app(config, build_components(config))
