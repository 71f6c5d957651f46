"""GrandID BankID federation gateway client.

Wraps the three JSON 1.1 endpoints the service needs:

    FederatedLogin  start a custom-UI (gui=false) transaction with QR support
    GetSession      poll a transaction (never more than once per 2 seconds)
    Logout          best-effort cancel of an outstanding BankID transaction

Transport failures, timeouts, HTTP error statuses and unparseable bodies
raise ProviderUnreachableError - a local networking problem that leaves the
session pending. Only a parsed GetSession body is classified into an Outcome.
"""

from __future__ import annotations

__all__ = [
    "GrandIDClient",
]

import base64
from typing import TYPE_CHECKING, Any

import httpx

from agentid.exceptions import ProviderRejectedError, ProviderUnreachableError
from agentid.provider.outcomes import Outcome, classify_session_response
from agentid.telemetry.system import get_system_logger

if TYPE_CHECKING:
    from agentid.config import ProviderConfig

_logger = get_system_logger()


class GrandIDClient:
    """Async client for the GrandID gateway.

    One instance is created at startup and shared by all requests; the
    underlying httpx.AsyncClient pools connections. Pass http_client to
    inject a transport in tests.

    Usage:
        client = GrandIDClient(config.provider)
        provider_session_id = await client.start_session()
        outcome = await client.poll_session(provider_session_id)
        await client.aclose()
    """

    def __init__(
        self,
        config: "ProviderConfig",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Provider configuration (base URL, keys, auth message).
            http_client: Optional httpx client (for testing).
        """
        self._config = config
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_seconds)
        self._owns_client = http_client is None

        base = config.base_url.rstrip("/")
        self._login_url = f"{base}/json1.1/FederatedLogin"
        self._session_url = f"{base}/json1.1/GetSession"
        self._logout_url = f"{base}/json1.1/Logout"

    @property
    def is_configured(self) -> bool:
        """True when API and service keys are both set."""
        return self._config.is_configured

    async def aclose(self) -> None:
        """Close HTTP client if we own it."""
        if self._owns_client:
            await self._client.aclose()

    def _credentials(self) -> dict[str, str]:
        return {
            "apiKey": self._config.api_key,
            "authenticateServiceKey": self._config.service_key,
        }

    async def _post_json(self, url: str, form: dict[str, str]) -> Any:
        """POST a form and decode the JSON reply.

        Raises:
            ProviderUnreachableError: On transport failure, HTTP error or bad JSON.
        """
        try:
            response = await self._client.post(url, data=form)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderUnreachableError(
                f"Identity provider returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderUnreachableError(f"Identity provider unreachable: {type(e).__name__}") from e
        except ValueError as e:
            raise ProviderUnreachableError("Identity provider returned a non-JSON response") from e

    async def start_session(self, callback_url: str | None = None) -> str:
        """Begin a QR-capable BankID transaction.

        Args:
            callback_url: Optional URL the provider redirects to afterwards.

        Returns:
            The provider's session id.

        Raises:
            ProviderUnreachableError: If the provider cannot be reached.
            ProviderRejectedError: If the provider refuses the transaction.
        """
        auth_message = base64.b64encode(self._config.auth_message.encode("utf-8")).decode("ascii")
        form = {
            **self._credentials(),
            "gui": "false",
            "qr": "true",
            "mobileBankId": "true",
            "allowFingerprintAuth": "true",
            "authMessage": auth_message,
        }
        if callback_url:
            form["callbackUrl"] = callback_url

        data = await self._post_json(self._login_url, form)
        if not isinstance(data, dict):
            raise ProviderUnreachableError("Identity provider returned an unexpected response")

        error_object = data.get("errorObject")
        if isinstance(error_object, dict):
            raise ProviderRejectedError(
                str(error_object.get("message") or "Identity provider rejected the request"),
                code=error_object.get("code"),
            )

        provider_session_id = data.get("sessionId")
        if not provider_session_id:
            raise ProviderRejectedError("Identity provider response had no sessionId")
        return str(provider_session_id)

    async def poll_session(self, provider_session_id: str) -> Outcome:
        """Fetch and classify the current transaction state.

        Exactly one provider round-trip per call.

        Raises:
            ProviderUnreachableError: If the provider cannot be reached.
        """
        data = await self._post_json(
            self._session_url,
            {**self._credentials(), "sessionId": provider_session_id},
        )
        return classify_session_response(data)

    async def cancel(self, provider_session_id: str) -> None:
        """Cancel an outstanding BankID transaction.

        Best-effort: failures are logged and swallowed, never raised.
        """
        params = {
            **self._credentials(),
            "sessionId": provider_session_id,
            "cancelBankID": "true",
        }
        try:
            response = await self._client.get(self._logout_url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            _logger.warning(
                {
                    "event": "provider_cancel_failed",
                    "message": f"Failed to cancel provider transaction: {type(e).__name__}",
                    "error_type": type(e).__name__,
                }
            )
