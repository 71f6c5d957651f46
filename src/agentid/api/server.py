"""FastAPI application factory.

Serves:
- Auth session API (/auth/start, /auth/status, /auth/{id}/poll, /auth/{id}/cancel)
- Interactive QR/status page (/auth/{id})
- Verification key set (/jwks, /.well-known/jwks.json)
- Liveness (/health)

Components (store, provider client, issuer, state machine) are built once
and stored on app.state; routes reach them through api/deps.py. The
lifespan closes the provider HTTP client and the store connection.

Usage:
    For local development:
        uvicorn agentid.app:create_app --factory --host 127.0.0.1 --port 8000
"""

from __future__ import annotations

__all__ = ["create_api_app"]

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from agentid import __version__
from agentid.exceptions import AgentIDError

from .errors import (
    APIError,
    api_error_handler,
    domain_error_handler,
    http_exception_handler,
    unhandled_error_handler,
    validation_error_handler,
)
from .routes import auth, health, jwks, page

if TYPE_CHECKING:
    from agentid.app import AppComponents
    from agentid.config import AppConfig


def create_api_app(
    config: "AppConfig",
    components: "AppComponents | None" = None,
) -> FastAPI:
    """Create the FastAPI application with all routes.

    Args:
        config: Application configuration.
        components: Pre-built components (tests inject fakes here). Built
            from config when None.

    Returns:
        Configured FastAPI application.
    """
    if components is None:
        from agentid.app import build_components

        components = build_components(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await components.aclose()

    app = FastAPI(
        title="AgentID",
        description="BankID-backed pseudonymous credentials for AI agents",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.components = components
    app.state.machine = components.machine
    app.state.issuer = components.issuer

    # Callers are agents and browser pages on other origins; no cookies involved
    if config.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.api.cors_origins,
            allow_credentials=False,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type"],
            expose_headers=["Retry-After"],
            max_age=3600,
        )

    # Register exception handlers for structured error responses
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(AgentIDError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # JSON routes before the page route so /auth/status is not a session id
    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(page.router, prefix="/auth", tags=["page"])
    app.include_router(jwks.router, tags=["jwks"])
    app.include_router(health.router, tags=["health"])

    return app
