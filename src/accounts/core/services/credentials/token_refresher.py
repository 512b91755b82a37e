"""Exchange stored refresh tokens for live access tokens."""

from loguru import logger

from src.accounts.core.errors import (
    NotFoundError,
    ProviderRefreshFailed,
    RefreshError,
    RefreshErrorReason,
    StaleCredentialError,
)
from src.accounts.core.services.providers import ProviderClientRegistry, TokenPair
from src.accounts.entities.core.identity import Identity, Provider
from src.accounts.runtime.config.config_data import ConfigData

from .credential_store import CredentialStore


class TokenRefresher:
    """Refreshes provider credentials and hands out live access tokens.

    The provider exchange runs with no transaction open. The result is written
    with a compare-and-swap on the refresh token that was read, so when two
    refreshes race the loser fails instead of storing a mixed pair.
    """

    def __init__(
        self,
        store: CredentialStore,
        clients: ProviderClientRegistry,
        websocket_urls: dict[Provider, str] | None = None,
    ):
        self._store = store
        self._clients = clients
        self._websocket_urls = websocket_urls or {}

    @classmethod
    def from_config(cls, store: CredentialStore, config: ConfigData) -> "TokenRefresher":
        """Wire HTTP provider clients and websocket templates from configuration."""
        websocket_urls = {
            Provider(name): provider_config.websocket_url
            for name, provider_config in config.providers.items()
            if provider_config.websocket_url and name in {p.value for p in Provider}
        }
        return cls(store, ProviderClientRegistry.from_config(config), websocket_urls)

    async def refresh(self, provider: Provider, refresh_token: str) -> TokenPair:
        """Exchange ``refresh_token`` at the provider; writes nothing.

        Raises:
            ProviderRefreshFailed: With the reason reported by the provider client
        """
        try:
            client = self._clients.get(provider)
            return await client.exchange_refresh_token(refresh_token)
        except RefreshError as e:
            raise ProviderRefreshFailed(provider, e.reason, e.message) from e

    async def refresh_credential(self, user_id: str, provider: Provider) -> TokenPair:
        """Refresh the stored credential and persist the new pair.

        Raises:
            NotFoundError: The user has no credential for ``provider``
            ProviderRefreshFailed: The exchange failed, the credential has no
                refresh token, or it was rotated while the exchange was in flight
        """
        identity = self._store.find_credential(user_id, provider)
        if identity is None:
            raise NotFoundError(f"{provider} credential", user_id)
        return await self._refresh_identity(identity)

    async def _refresh_identity(self, identity: Identity) -> TokenPair:
        user_id, provider = identity.user_id, identity.provider
        if not identity.provider_refresh_token:
            raise ProviderRefreshFailed(
                provider,
                RefreshErrorReason.PROVIDER_REJECTED,
                f"{provider} credential for user {user_id} has no refresh token",
            )

        tokens = await self.refresh(provider, identity.provider_refresh_token)

        try:
            self._store.upsert_credential_tokens(
                user_id,
                provider,
                tokens.access_token,
                refresh_token=tokens.refresh_token,
                expected_refresh_token=identity.provider_refresh_token,
            )
        except StaleCredentialError as e:
            logger.warning("{} credential for user {} was rotated concurrently", provider, user_id)
            raise ProviderRefreshFailed(provider, RefreshErrorReason.STALE, e.message) from e

        logger.info("Refreshed {} credential for user {}", provider, user_id)
        return tokens

    async def get_live_token_or_raise(self, user_id: str, provider: Provider) -> str | None:
        """Like ``get_live_token`` but refresh failures propagate."""
        identity = self._store.find_credential(user_id, provider)
        if identity is None:
            return None
        tokens = await self._refresh_identity(identity)
        return tokens.access_token

    async def get_live_token(self, user_id: str, provider: Provider) -> str | None:
        """Return a freshly refreshed access token.

        Every call refreshes; there is no expiry check.

        Returns:
            The new access token, or None when the user has no credential for
            ``provider`` or the refresh failed
        """
        try:
            return await self.get_live_token_or_raise(user_id, provider)
        except NotFoundError:
            # Credential removed while the exchange was in flight
            logger.info("{} credential for user {} no longer exists", provider, user_id)
            return None
        except ProviderRefreshFailed as e:
            logger.warning(
                "No live {} token for user {}: {}", provider, user_id, e.reason.value
            )
            return None

    async def websocket_url(self, user_id: str, provider: Provider = Provider.RESTREAM) -> str | None:
        """Websocket URL for ``provider`` authenticated with a live token."""
        template = self._websocket_urls.get(provider)
        if template is None:
            return None
        token = await self.get_live_token(user_id, provider)
        if token is None:
            return None
        return template.format(token=token)

    async def restream_websocket_url(self, user_id: str) -> str | None:
        return await self.websocket_url(user_id, Provider.RESTREAM)
