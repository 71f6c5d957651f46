"""Shared fixtures: RSA key material, signing config, issuer, stores."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from agentid.config import AppConfig, SigningConfig
from agentid.issuance.issuer import CredentialIssuer
from agentid.sessions.store import MemorySessionStore
from agentid.telemetry.auth_logger import AuthLogger

HMAC_SECRET = "test-hmac-secret"


def _private_pem(key: rsa.RSAPrivateKey) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


def _public_pem(key: rsa.RSAPrivateKey) -> str:
    return (
        key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """One RSA key for the whole run (generation is slow)."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key() -> rsa.RSAPrivateKey:
    """A second, unrelated RSA key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_pem(rsa_private_key) -> str:
    return _private_pem(rsa_private_key)


@pytest.fixture(scope="session")
def public_pem(rsa_private_key) -> str:
    return _public_pem(rsa_private_key)


@pytest.fixture(scope="session")
def other_public_pem(other_private_key) -> str:
    return _public_pem(other_private_key)


@pytest.fixture(scope="session")
def other_private_pem(other_private_key) -> str:
    return _private_pem(other_private_key)


@pytest.fixture
def signing_config(private_pem, public_pem) -> SigningConfig:
    """Complete signing configuration with the session key pair."""
    return SigningConfig(
        private_key_pem=private_pem,
        public_key_pem=public_pem,
        hmac_secret=HMAC_SECRET,
    )


@pytest.fixture
def issuer(signing_config) -> CredentialIssuer:
    return CredentialIssuer(signing_config)


@pytest.fixture
def app_config(signing_config) -> AppConfig:
    """AppConfig with provider keys, signing keys and no rate limiting."""
    return AppConfig.model_validate(
        {
            "provider": {"api_key": "api-key", "service_key": "service-key"},
            "signing": signing_config.model_dump(),
            "api": {"min_poll_interval_seconds": 0},
        }
    )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock) -> MemorySessionStore:
    """In-memory store: 600s pending TTL, 3600s terminal TTL, fake clock."""
    return MemorySessionStore(600, 3600, clock=clock)


@pytest.fixture
def auth_logger() -> MagicMock:
    """Mock audit logger limited to AuthLogger's methods."""
    return MagicMock(spec=AuthLogger)


@pytest.fixture
def provider() -> MagicMock:
    """Mock GrandIDClient with async methods."""
    mock = MagicMock()
    mock.is_configured = True
    mock.start_session = AsyncMock(return_value="grandid-session-1")
    mock.poll_session = AsyncMock()
    mock.cancel = AsyncMock()
    mock.aclose = AsyncMock()
    return mock
