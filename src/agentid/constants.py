"""Application-wide constants for agentid.

Constants that define application behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    # Identity provider
    "DEFAULT_PROVIDER_BASE_URL",
    "DEFAULT_AUTH_MESSAGE",
    "PROVIDER_TIMEOUT_SECONDS",
    "PROVIDER_MIN_POLL_INTERVAL_SECONDS",
    # Credential issuance
    "DEFAULT_ISSUER",
    "DEFAULT_KEY_ID",
    "DEFAULT_SIGNING_ALGORITHM",
    "DEFAULT_AUTH_METHOD",
    "DEFAULT_TOKEN_TTL_SECONDS",
    # Session store
    "DEFAULT_KEY_PREFIX",
    "DEFAULT_PENDING_TTL_SECONDS",
    # Failure reasons
    "ISSUANCE_ERROR",
    "NOT_STARTED_HINT_CODE",
    # HTTP API
    "DEFAULT_API_HOST",
    "DEFAULT_API_PORT",
    "AUTH_PAGE_POLL_INTERVAL_MS",
]

# ============================================================================
# Application Identity
# ============================================================================

# Application name used for logger names, config directory, etc.
APP_NAME: str = "agentid"

# ============================================================================
# Identity Provider (GrandID BankID federation gateway)
# ============================================================================

# Test environment; production deployments override via GRANDID_BASE_URL
DEFAULT_PROVIDER_BASE_URL: str = "https://client.test.grandid.com"

# Prompt displayed inside the BankID app (sent base64-encoded)
DEFAULT_AUTH_MESSAGE: str = "AgentId verifierar din identitet för AI-agent åtkomst."

# Timeout for each provider HTTP round-trip
PROVIDER_TIMEOUT_SECONDS: float = 10.0

# The provider forbids polling one session more often than this
PROVIDER_MIN_POLL_INTERVAL_SECONDS: float = 2.0

# ============================================================================
# Credential Issuance
# ============================================================================

DEFAULT_ISSUER: str = "agentid"
DEFAULT_KEY_ID: str = "agentid-key-1"
DEFAULT_SIGNING_ALGORITHM: str = "RS256"
DEFAULT_AUTH_METHOD: str = "bankid"

# Single source of truth for credential validity (1 hour).
# Signing, terminal session retention and JWKS Cache-Control all derive from it.
DEFAULT_TOKEN_TTL_SECONDS: int = 3600

# ============================================================================
# Session Store
# ============================================================================

# Keys are "<prefix>:session:<session_id>"
DEFAULT_KEY_PREFIX: str = "agentid"

# Pending sessions are reclaimed after 10 minutes if never completed
DEFAULT_PENDING_TTL_SECONDS: int = 600

# ============================================================================
# Failure Reasons
# ============================================================================

# Identity check succeeded but no credential could be produced
ISSUANCE_ERROR: str = "ISSUANCE_ERROR"

# Reported while the user has not yet opened the BankID app
NOT_STARTED_HINT_CODE: str = "outstandingTransaction"

# ============================================================================
# HTTP API
# ============================================================================

DEFAULT_API_HOST: str = "127.0.0.1"
DEFAULT_API_PORT: int = 8000

# Interactive page poll interval, kept above the provider minimum
AUTH_PAGE_POLL_INTERVAL_MS: int = 2500
