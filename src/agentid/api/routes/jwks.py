"""Verification key set endpoints.

- GET /jwks
- GET /.well-known/jwks.json (same document)

Cache-Control max-age equals the credential validity, so relying
parties can verify offline without re-fetching per token.
"""

from __future__ import annotations

__all__ = ["router"]

from fastapi import APIRouter, Response

from agentid.api.deps import IssuerDep
from agentid.api.errors import APIError, ErrorCode
from agentid.api.schemas import ErrorResponse, JsonWebKeySet
from agentid.exceptions import IssuanceError
from agentid.telemetry.system import get_system_logger

router = APIRouter()


@router.get(
    "/jwks",
    response_model=JsonWebKeySet,
    responses={503: {"model": ErrorResponse}},
)
@router.get(
    "/.well-known/jwks.json",
    response_model=JsonWebKeySet,
    include_in_schema=False,
)
async def get_jwks(issuer: IssuerDep, response: Response) -> dict:
    """Publish the public verification key."""
    try:
        key_set = issuer.public_key_set()
    except IssuanceError as e:
        get_system_logger().error(
            {
                "event": "jwks_unavailable",
                "message": f"Cannot publish key set: {e}",
                "error_type": type(e).__name__,
            }
        )
        raise APIError(
            status_code=503,
            code=ErrorCode.SERVICE_MISCONFIGURED,
            message="Verification keys are not configured.",
        ) from e

    response.headers["Cache-Control"] = f"public, max-age={issuer.token_ttl_seconds}"
    return key_set
