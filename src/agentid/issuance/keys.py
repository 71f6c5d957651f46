"""Signing key material.

SigningKeys is an immutable bundle parsed once from configured PEM text
and handed to the issuer. Loading is separate from construction of the
issuer so tests can inject keys directly and a deployment with missing
keys still starts: the failure surfaces as IssuanceError on first use.
"""

from __future__ import annotations

__all__ = [
    "SigningKeys",
    "load_signing_keys",
]

from dataclasses import dataclass, field

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from agentid.config import SigningConfig
from agentid.exceptions import IssuanceError


@dataclass(frozen=True)
class SigningKeys:
    """Parsed key material for credential issuance.

    Attributes:
        private_key: RSA private key. Never leaves the process.
        public_key: Matching RSA public key, published via JWKS.
        key_id: Key identifier for the token header and JWKS entry.
    """

    private_key: RSAPrivateKey = field(repr=False)
    public_key: RSAPublicKey
    key_id: str


def _load_private_key(pem: str) -> RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise IssuanceError(f"Signing private key is not a valid PEM key: {type(e).__name__}") from e
    if not isinstance(key, RSAPrivateKey):
        raise IssuanceError("Signing private key must be an RSA key")
    return key


def _load_public_key(pem: str) -> RSAPublicKey:
    try:
        key = serialization.load_pem_public_key(pem.encode("utf-8"))
    except (ValueError, UnsupportedAlgorithm) as e:
        raise IssuanceError(f"Signing public key is not a valid PEM key: {type(e).__name__}") from e
    if not isinstance(key, RSAPublicKey):
        raise IssuanceError("Signing public key must be an RSA key")
    return key


def load_signing_keys(config: SigningConfig) -> SigningKeys:
    """Parse the configured key pair.

    The public key is derived from the private key when not configured.
    A configured public key must match the private key, otherwise every
    published verification would fail.

    Args:
        config: Signing configuration holding PEM text.

    Returns:
        Immutable SigningKeys.

    Raises:
        IssuanceError: If key material is missing, unparseable or mismatched.
    """
    if not config.private_key_pem.strip():
        raise IssuanceError("Signing private key is not configured (JWT_PRIVATE_KEY)")

    private_key = _load_private_key(config.private_key_pem)
    derived_public = private_key.public_key()

    if config.public_key_pem.strip():
        public_key = _load_public_key(config.public_key_pem)
        if public_key.public_numbers() != derived_public.public_numbers():
            raise IssuanceError("Signing public key does not match the private key")
    else:
        public_key = derived_public

    return SigningKeys(private_key=private_key, public_key=public_key, key_id=config.key_id)
