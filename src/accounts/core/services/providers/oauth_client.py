"""OAuth2 refresh-token exchange over HTTP."""

import base64

import httpx
from loguru import logger
from pydantic import ValidationError

from src.accounts.core.errors import RefreshError, RefreshErrorReason
from src.accounts.entities.core.identity import Provider
from src.accounts.runtime.config.config_data import ProviderConfig

from .base import TokenPair


class OAuthProviderClient:
    """Standard ``grant_type=refresh_token`` client for a configured provider."""

    def __init__(self, provider: Provider, config: ProviderConfig):
        self.provider = provider
        self._config = config

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }
        if self._config.client_secret:
            credentials = f"{self._config.client_id}:{self._config.client_secret}"
            encoded_credentials = base64.b64encode(credentials.encode()).decode()
            headers["Authorization"] = f"Basic {encoded_credentials}"
        return headers

    async def exchange_refresh_token(self, refresh_token: str) -> TokenPair:
        """Refresh an access token.

        Args:
            refresh_token: Refresh token currently stored for the user

        Returns:
            The new token pair

        Raises:
            RefreshError: ``provider_rejected`` for 4xx or an OAuth error body,
                ``network`` for transport failures and 5xx, ``malformed`` for an
                unparseable response
        """
        token_data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self._config.client_id,
        }

        try:
            async with httpx.AsyncClient(timeout=self._config.timeout_seconds) as client:
                response = await client.post(
                    self._config.token_endpoint, data=token_data, headers=self._headers()
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning("{} token endpoint returned HTTP {}", self.provider, status_code)
            reason = (
                RefreshErrorReason.NETWORK
                if status_code >= 500
                else RefreshErrorReason.PROVIDER_REJECTED
            )
            raise RefreshError(
                reason,
                f"{self.provider} token endpoint returned HTTP {status_code}",
                {"status_code": status_code},
            ) from e
        except httpx.RequestError as e:
            logger.warning("{} token endpoint unreachable: {}", self.provider, type(e).__name__)
            raise RefreshError(
                RefreshErrorReason.NETWORK,
                f"{self.provider} token endpoint unreachable: {type(e).__name__}",
            ) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise RefreshError(
                RefreshErrorReason.MALFORMED, f"{self.provider} returned a non-JSON body"
            ) from e

        if not isinstance(payload, dict):
            raise RefreshError(
                RefreshErrorReason.MALFORMED, f"{self.provider} returned an unexpected body"
            )

        # Some providers answer 200 with an OAuth error body
        if "error" in payload:
            raise RefreshError(
                RefreshErrorReason.PROVIDER_REJECTED,
                f"{self.provider} rejected the refresh token: {payload['error']}",
                {"error": payload["error"]},
            )

        try:
            return TokenPair.model_validate(payload)
        except ValidationError as e:
            raise RefreshError(
                RefreshErrorReason.MALFORMED,
                f"{self.provider} token response is missing required fields",
            ) from e
