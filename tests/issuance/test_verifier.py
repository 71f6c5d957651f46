"""Tests for offline credential verification."""

from __future__ import annotations

import json
import time

import jwt
import pytest
from jwt.utils import base64url_decode, base64url_encode

from agentid.exceptions import CredentialVerificationError
from agentid.issuance.issuer import CredentialIssuer
from agentid.issuance.verifier import CredentialVerifier

PERSONAL_NUMBER = "199001010000"


@pytest.fixture
def verifier(issuer) -> CredentialVerifier:
    return CredentialVerifier(issuer.public_key_set())


class TestVerify:
    """Accepting good credentials."""

    def test_accepts_issued_token(self, issuer, verifier):
        """A freshly issued token verifies and exposes its claims."""
        credential = issuer.issue(PERSONAL_NUMBER)

        result = verifier.verify(credential.token)

        assert result.subject == credential.subject
        assert result.jti == credential.jti
        assert result.auth_method == "bankid"
        assert int(result.issued_at.timestamp()) == credential.issued_at
        assert int(result.expires_at.timestamp()) == credential.expires_at
        assert result.claims["iss"] == "agentid"

    def test_token_without_kid_uses_only_key(self, issuer, verifier):
        """A kid-less token is checked against a single-key set."""
        now = int(time.time())
        token = jwt.encode(
            {"iss": "agentid", "sub": "s", "iat": now, "exp": now + 60, "jti": "j"},
            issuer.keys.private_key,
            algorithm="RS256",
        )

        assert verifier.verify(token).subject == "s"


class TestReject:
    """Rejecting bad credentials."""

    def test_tampered_payload(self, issuer, verifier):
        """Changing the payload breaks the signature."""
        token = issuer.issue(PERSONAL_NUMBER).token
        header, payload, signature = token.split(".")
        claims = json.loads(base64url_decode(payload))
        claims["sub"] = "someone-else"
        forged = ".".join([header, base64url_encode(json.dumps(claims).encode()).decode(), signature])

        with pytest.raises(CredentialVerificationError, match="signature"):
            verifier.verify(forged)

    def test_signed_by_other_key(self, other_private_pem, signing_config, verifier):
        """A token signed with another key under the same kid fails."""
        config = signing_config.model_copy(update={"private_key_pem": other_private_pem, "public_key_pem": ""})
        rogue = CredentialIssuer(config)

        with pytest.raises(CredentialVerificationError, match="signature"):
            verifier.verify(rogue.issue(PERSONAL_NUMBER).token)

    def test_wrong_issuer(self, signing_config, verifier):
        """Tokens from another issuer are rejected."""
        config = signing_config.model_copy(update={"issuer": "someone-else"})
        other = CredentialIssuer(config)

        with pytest.raises(CredentialVerificationError, match="issuer"):
            verifier.verify(other.issue(PERSONAL_NUMBER).token)

    def test_expired(self, signing_config, verifier):
        """Tokens past exp are rejected."""
        stale = CredentialIssuer(signing_config, clock=lambda: time.time() - 7200)

        with pytest.raises(CredentialVerificationError, match="expired"):
            verifier.verify(stale.issue(PERSONAL_NUMBER).token)

    def test_unexpected_algorithm(self, verifier):
        """A symmetric token is refused before any key lookup."""
        now = int(time.time())
        token = jwt.encode(
            {"iss": "agentid", "sub": "s", "iat": now, "exp": now + 60, "jti": "j"},
            "a-shared-secret-that-is-long-enough-for-hs256",
            algorithm="HS256",
            headers={"kid": "agentid-key-1"},
        )

        with pytest.raises(CredentialVerificationError, match="algorithm"):
            verifier.verify(token)

    def test_unknown_kid(self, signing_config, verifier):
        """A kid absent from the set is rejected."""
        config = signing_config.model_copy(update={"key_id": "retired-key"})
        other = CredentialIssuer(config)

        with pytest.raises(CredentialVerificationError, match="kid"):
            verifier.verify(other.issue(PERSONAL_NUMBER).token)

    def test_missing_required_claim(self, issuer, verifier):
        """Tokens lacking jti are rejected."""
        now = int(time.time())
        token = jwt.encode(
            {"iss": "agentid", "sub": "s", "iat": now, "exp": now + 60},
            issuer.keys.private_key,
            algorithm="RS256",
            headers={"kid": "agentid-key-1"},
        )

        with pytest.raises(CredentialVerificationError):
            verifier.verify(token)

    def test_garbage(self, verifier):
        """Non-JWT input is rejected."""
        with pytest.raises(CredentialVerificationError):
            verifier.verify("not-a-token")

    def test_invalid_key_set(self):
        """An unusable JWKS document fails at construction."""
        with pytest.raises(CredentialVerificationError):
            CredentialVerifier({"keys": []})

