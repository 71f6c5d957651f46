"""Key set and health schemas."""

from __future__ import annotations

__all__ = [
    "HealthResponse",
    "JsonWebKey",
    "JsonWebKeySet",
]

from typing import Literal

from pydantic import BaseModel


class JsonWebKey(BaseModel):
    """One RSA verification key."""

    kty: Literal["RSA"]
    use: Literal["sig"]
    alg: str
    kid: str
    n: str
    e: str


class JsonWebKeySet(BaseModel):
    """Published verification keys."""

    keys: list[JsonWebKey]


class HealthResponse(BaseModel):
    """Liveness response."""

    status: Literal["ok"]
    version: str
