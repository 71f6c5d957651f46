"""Credential issuance and verification.

- keys: immutable signing key material
- issuer: pseudonymous subject derivation, signing, JWKS export
- verifier: offline verification against a published JWKS
"""

from agentid.issuance.issuer import CredentialIssuer, IssuedCredential
from agentid.issuance.keys import SigningKeys, load_signing_keys
from agentid.issuance.verifier import CredentialVerifier, VerifiedCredential

__all__ = [
    "CredentialIssuer",
    "CredentialVerifier",
    "IssuedCredential",
    "SigningKeys",
    "VerifiedCredential",
    "load_signing_keys",
]
