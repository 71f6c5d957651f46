"""Liveness endpoint.

- GET /health
"""

from __future__ import annotations

__all__ = ["router"]

from fastapi import APIRouter

from agentid import __version__
from agentid.api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Report that the process is serving requests."""
    return HealthResponse(status="ok", version=__version__)
