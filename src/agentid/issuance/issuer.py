"""Credential issuer.

Turns a verified personal number into a short-lived signed token:

    sub = hex(HMAC-SHA256(hmac_secret, personal_number))

The claim set is {iss, sub, auth_method, iat, exp, jti}. No name or
personal number is ever placed in it. Apart from iat/exp/jti, issue() is
a pure function of the personal number, so two issuances for the same
person carry the same subject.
"""

from __future__ import annotations

__all__ = [
    "CredentialIssuer",
    "IssuedCredential",
]

import hashlib
import hmac
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

import jwt
from jwt.algorithms import RSAAlgorithm

from agentid.config import SigningConfig
from agentid.exceptions import IssuanceError
from agentid.issuance.keys import SigningKeys, load_signing_keys


@dataclass(frozen=True)
class IssuedCredential:
    """A freshly signed credential.

    Attributes:
        token: Compact JWS string.
        subject: Pseudonymous subject ('sub').
        jti: Unique token id.
        issued_at: 'iat' (epoch seconds).
        expires_at: 'exp' (epoch seconds).
    """

    token: str = field(repr=False)
    subject: str
    jti: str
    issued_at: int
    expires_at: int


class CredentialIssuer:
    """Derives pseudonymous subjects and signs credentials.

    Key material is parsed on first use and then held immutably. If
    parsing fails the error is raised to that caller (and every later
    one) as IssuanceError; nothing is cached until it succeeds.

    Usage:
        issuer = CredentialIssuer(config.signing)
        credential = issuer.issue("199001010000")
        jwks = issuer.public_key_set()
    """

    def __init__(
        self,
        config: SigningConfig,
        keys: SigningKeys | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the issuer.

        Args:
            config: Signing configuration.
            keys: Pre-loaded key material (tests). Loaded from config if None.
            clock: Wall-clock source in epoch seconds.
        """
        self._config = config
        self._keys = keys
        self._clock = clock
        self._jwks: dict[str, Any] | None = None

    @property
    def token_ttl_seconds(self) -> int:
        return self._config.token_ttl_seconds

    @property
    def keys(self) -> SigningKeys:
        """Key material, loaded on first access.

        Raises:
            IssuanceError: If key material is missing or invalid.
        """
        if self._keys is None:
            self._keys = load_signing_keys(self._config)
        return self._keys

    def derive_subject(self, personal_number: str) -> str:
        """Derive the pseudonymous subject for a personal number.

        Deterministic for the life of the HMAC secret; rotating the
        secret changes every derived subject.

        Raises:
            IssuanceError: If the HMAC secret is not configured.
        """
        secret = self._config.hmac_secret
        if not secret:
            raise IssuanceError("Subject HMAC secret is not configured (JWT_HMAC_SECRET)")
        return hmac.new(
            secret.encode("utf-8"),
            personal_number.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def issue(self, personal_number: str) -> IssuedCredential:
        """Sign a credential for a verified personal number.

        Args:
            personal_number: National identifier released by the provider.
                Used only to derive the subject.

        Returns:
            IssuedCredential with exp - iat == token_ttl_seconds.

        Raises:
            IssuanceError: If keys or secret are missing, or signing fails.
        """
        subject = self.derive_subject(personal_number)
        keys = self.keys

        issued_at = int(self._clock())
        expires_at = issued_at + self._config.token_ttl_seconds
        jti = str(uuid.uuid4())
        claims = {
            "iss": self._config.issuer,
            "sub": subject,
            "auth_method": self._config.auth_method,
            "iat": issued_at,
            "exp": expires_at,
            "jti": jti,
        }

        try:
            token = jwt.encode(
                claims,
                keys.private_key,
                algorithm=self._config.algorithm,
                headers={"kid": keys.key_id},
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise IssuanceError(f"Credential signing failed: {type(e).__name__}") from e

        if not token:
            raise IssuanceError("Credential signing produced an empty token")

        return IssuedCredential(
            token=token,
            subject=subject,
            jti=jti,
            issued_at=issued_at,
            expires_at=expires_at,
        )

    def public_key_set(self) -> dict[str, Any]:
        """Export the verification key as a single-entry JWKS.

        Cached after first computation; the key is static for the
        process lifetime.

        Raises:
            IssuanceError: If key material is missing or invalid.
        """
        if self._jwks is None:
            keys = self.keys
            jwk = RSAAlgorithm.to_jwk(keys.public_key, as_dict=True)
            self._jwks = {
                "keys": [
                    {
                        "kty": "RSA",
                        "use": "sig",
                        "alg": self._config.algorithm,
                        "kid": keys.key_id,
                        "n": jwk["n"],
                        "e": jwk["e"],
                    }
                ]
            }
        return self._jwks
