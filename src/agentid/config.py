"""Application configuration for agentid.

Defines configuration models for the identity provider, credential signing,
session storage, HTTP API and logging. Configuration comes from an optional
JSON file (OS-appropriate location via platformdirs) overlaid with
environment variables, which is how container deployments supply secrets.

Secrets are never validated as present here. Missing provider credentials
fail the start endpoint with 503, and missing key material fails issuance
with ISSUANCE_ERROR, so the service still starts and serves what it can.

Example usage:
    # Load from default location plus environment
    config = load_config()

    # Load from explicit path
    config = load_config(Path("/etc/agentid/config.json"))
"""

from __future__ import annotations

__all__ = [
    "ApiConfig",
    "AppConfig",
    "LoggingConfig",
    "ProviderConfig",
    "SigningConfig",
    "StoreConfig",
    "get_default_config_path",
    "load_config",
]

import json
import os
from pathlib import Path
from typing import Literal, Mapping

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError

from agentid.constants import (
    APP_NAME,
    DEFAULT_AUTH_MESSAGE,
    DEFAULT_AUTH_METHOD,
    DEFAULT_ISSUER,
    DEFAULT_KEY_ID,
    DEFAULT_KEY_PREFIX,
    DEFAULT_PENDING_TTL_SECONDS,
    DEFAULT_PROVIDER_BASE_URL,
    DEFAULT_SIGNING_ALGORITHM,
    DEFAULT_TOKEN_TTL_SECONDS,
    PROVIDER_MIN_POLL_INTERVAL_SECONDS,
    PROVIDER_TIMEOUT_SECONDS,
)
from agentid.exceptions import ConfigurationError


# =============================================================================
# Configuration Models
# =============================================================================


class ProviderConfig(BaseModel):
    """GrandID BankID federation gateway configuration.

    Attributes:
        base_url: Gateway base URL (test environment by default).
        api_key: GrandID API key.
        service_key: GrandID authenticate service key.
        auth_message: Prompt shown inside the BankID app.
        timeout_seconds: Per-request HTTP timeout.
    """

    base_url: str = Field(default=DEFAULT_PROVIDER_BASE_URL, min_length=1)
    api_key: str = ""
    service_key: str = ""
    auth_message: str = Field(default=DEFAULT_AUTH_MESSAGE, min_length=1)
    timeout_seconds: float = Field(default=PROVIDER_TIMEOUT_SECONDS, gt=0, le=60)

    @property
    def is_configured(self) -> bool:
        """True when both provider credentials are present."""
        return bool(self.api_key and self.service_key)


class SigningConfig(BaseModel):
    """Credential signing configuration.

    Attributes:
        private_key_pem: RSA private key (PKCS#8 PEM). Never leaves the process.
        public_key_pem: Matching public key (SPKI PEM), published via JWKS.
        hmac_secret: Secret for pseudonymous subject derivation.
        key_id: Key identifier placed in the token header and JWKS.
        issuer: Value of the 'iss' claim.
        algorithm: Signing algorithm (asymmetric).
        auth_method: Value of the 'auth_method' claim.
        token_ttl_seconds: Credential validity. Also drives terminal session
            retention and JWKS cache headers.
    """

    private_key_pem: str = ""
    public_key_pem: str = ""
    hmac_secret: str = ""
    key_id: str = Field(default=DEFAULT_KEY_ID, min_length=1)
    issuer: str = Field(default=DEFAULT_ISSUER, min_length=1)
    algorithm: Literal["RS256", "RS384", "RS512"] = DEFAULT_SIGNING_ALGORITHM
    auth_method: str = Field(default=DEFAULT_AUTH_METHOD, min_length=1)
    token_ttl_seconds: int = Field(default=DEFAULT_TOKEN_TTL_SECONDS, ge=60, le=86400)


class StoreConfig(BaseModel):
    """Session store configuration.

    Attributes:
        redis_url: Redis connection URL. If unset, the in-memory store is used,
            which is single-process only and NOT suitable for multi-instance
            or production deployment.
        key_prefix: Namespace prefix for session keys.
        pending_ttl_seconds: Lifetime of sessions that never reach a terminal state.
    """

    redis_url: str | None = None
    key_prefix: str = Field(default=DEFAULT_KEY_PREFIX, min_length=1)
    pending_ttl_seconds: int = Field(default=DEFAULT_PENDING_TTL_SECONDS, ge=30, le=3600)


class ApiConfig(BaseModel):
    """HTTP API configuration.

    Attributes:
        public_base_url: Externally visible base URL used to build authUrl.
            Falls back to the request's base URL when unset.
        cors_origins: Origins allowed to call the API from a browser.
        min_poll_interval_seconds: Minimum spacing between provider polls
            for one session (the provider forbids faster polling).
    """

    public_base_url: str | None = None
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    min_poll_interval_seconds: float = Field(
        default=PROVIDER_MIN_POLL_INTERVAL_SECONDS,
        ge=0,
        le=60,
    )


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        log_dir: Directory for system.jsonl and auth.jsonl. Console only if unset.
        level: Console log level.
    """

    log_dir: str | None = None
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class AppConfig(BaseModel):
    """Complete agentid configuration."""

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    signing: SigningConfig = Field(default_factory=SigningConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"extra": "ignore"}  # Ignore unknown fields for forward compat

    @property
    def terminal_ttl_seconds(self) -> int:
        """Retention for completed/failed sessions, matching credential validity."""
        return self.signing.token_ttl_seconds


# =============================================================================
# Loading
# =============================================================================

# Environment variable -> (section, field)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "GRANDID_BASE_URL": ("provider", "base_url"),
    "GRANDID_API_KEY": ("provider", "api_key"),
    "GRANDID_SERVICE_KEY": ("provider", "service_key"),
    "JWT_PRIVATE_KEY": ("signing", "private_key_pem"),
    "JWT_PUBLIC_KEY": ("signing", "public_key_pem"),
    "JWT_HMAC_SECRET": ("signing", "hmac_secret"),
    "REDIS_URL": ("store", "redis_url"),
    "AGENTID_PUBLIC_BASE_URL": ("api", "public_base_url"),
    "AGENTID_LOG_DIR": ("logging", "log_dir"),
}

_PEM_FIELDS = frozenset({"private_key_pem", "public_key_pem"})


def get_default_config_path() -> Path:
    """Get the full path to the default config file.

    Returns:
        Path to config.json in the OS-appropriate config directory.
    """
    return Path(user_config_dir(APP_NAME)) / "config.json"


def _restore_pem_newlines(value: str) -> str:
    """Restore real newlines in PEM values stored with literal \\n escapes."""
    return value.replace("\\n", "\n")


def _read_config_file(config_path: Path) -> dict:
    """Read raw config data from JSON file.

    Raises:
        ConfigurationError: If the file is unreadable or not a JSON object.
    """
    try:
        with config_path.open(encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid config in {config_path}: expected a JSON object")
    return data


def _apply_env_overrides(data: dict, environ: Mapping[str, str]) -> dict:
    """Overlay environment variables onto raw config data."""
    for env_var, (section, field) in _ENV_OVERRIDES.items():
        value = environ.get(env_var)
        if not value:
            continue
        if field in _PEM_FIELDS:
            value = _restore_pem_newlines(value)
        data.setdefault(section, {})[field] = value

    cors = environ.get("AGENTID_CORS_ORIGINS", "").strip()
    if cors:
        data.setdefault("api", {})["cors_origins"] = [o.strip() for o in cors.split(",") if o.strip()]

    return data


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load configuration from file and environment.

    A missing config file is not an error - env-only deployments are normal.
    An explicitly given path must exist.

    Args:
        config_path: Path to JSON config. Defaults to get_default_config_path().
        environ: Environment mapping (defaults to os.environ, injectable for tests).

    Returns:
        Validated AppConfig.

    Raises:
        ConfigurationError: If the file is invalid or values fail validation.
    """
    env = os.environ if environ is None else environ
    explicit = config_path is not None
    path = config_path if config_path is not None else get_default_config_path()

    data: dict = {}
    if path.exists():
        data = _read_config_file(path)
    elif explicit:
        raise ConfigurationError(f"Config file not found at {path}")

    data = _apply_env_overrides(data, env)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"  - {loc}: {error['msg']}")
        raise ConfigurationError("Invalid configuration:\n" + "\n".join(errors)) from e
