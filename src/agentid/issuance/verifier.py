"""Offline credential verification against a published key set.

What a relying party does with a credential: pick the key by 'kid' from
the JWKS, check the signature with the one expected algorithm, then
check issuer and expiry. Nothing here contacts the issuing service.
"""

from __future__ import annotations

__all__ = [
    "CredentialVerifier",
    "VerifiedCredential",
]

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import jwt

from agentid.constants import DEFAULT_ISSUER, DEFAULT_SIGNING_ALGORITHM
from agentid.exceptions import CredentialVerificationError

_REQUIRED_CLAIMS = ["iss", "sub", "iat", "exp", "jti"]


@dataclass
class VerifiedCredential:
    """Result of successful credential verification.

    Attributes:
        subject: The 'sub' claim - pseudonymous identifier.
        jti: The 'jti' claim - unique token id.
        issued_at: When the credential was issued.
        expires_at: When the credential expires.
        auth_method: The 'auth_method' claim (e.g., "bankid").
        claims: All token claims.
    """

    subject: str
    jti: str
    issued_at: datetime
    expires_at: datetime
    auth_method: str | None
    claims: dict[str, Any] = field(default_factory=dict)


class CredentialVerifier:
    """Verifies credentials with keys from a JWKS document.

    Usage:
        verifier = CredentialVerifier(jwks, issuer="agentid")
        result = verifier.verify(token)
        print(result.subject)
    """

    def __init__(
        self,
        jwks: dict[str, Any],
        issuer: str = DEFAULT_ISSUER,
        algorithm: str = DEFAULT_SIGNING_ALGORITHM,
    ) -> None:
        """Initialize the verifier.

        Args:
            jwks: Key set document ({"keys": [...]}).
            issuer: Expected 'iss' claim.
            algorithm: The only accepted signing algorithm.

        Raises:
            CredentialVerificationError: If the key set cannot be parsed.
        """
        try:
            self._key_set = jwt.PyJWKSet.from_dict(jwks)
        except jwt.PyJWTError as e:
            raise CredentialVerificationError(f"Invalid key set: {e}") from e
        self._issuer = issuer
        self._algorithm = algorithm

    def _select_key(self, token: str) -> Any:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.DecodeError as e:
            raise CredentialVerificationError(f"Token decode error: {e}") from e

        if header.get("alg") != self._algorithm:
            raise CredentialVerificationError(
                f"Token algorithm {header.get('alg')!r} is not the expected {self._algorithm}"
            )

        kid = header.get("kid")
        if kid is None:
            if len(self._key_set.keys) == 1:
                return self._key_set.keys[0].key
            raise CredentialVerificationError("Token header has no 'kid'")
        try:
            return self._key_set[kid].key
        except KeyError as e:
            raise CredentialVerificationError(f"No published key with kid {kid!r}") from e

    def verify(self, token: str) -> VerifiedCredential:
        """Verify a credential.

        Args:
            token: Compact JWS string.

        Returns:
            VerifiedCredential with extracted claims.

        Raises:
            CredentialVerificationError: If verification fails for any reason.
        """
        key = self._select_key(token)

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": _REQUIRED_CLAIMS, "verify_aud": False},
            )
        except jwt.ExpiredSignatureError as e:
            raise CredentialVerificationError("Token has expired") from e
        except jwt.InvalidIssuerError as e:
            raise CredentialVerificationError(f"Token issuer mismatch: expected {self._issuer}") from e
        except jwt.InvalidSignatureError as e:
            raise CredentialVerificationError("Token signature is invalid") from e
        except jwt.PyJWTError as e:
            raise CredentialVerificationError(f"Token validation error: {e}") from e

        return VerifiedCredential(
            subject=claims["sub"],
            jti=claims["jti"],
            issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            auth_method=claims.get("auth_method"),
            claims=claims,
        )
