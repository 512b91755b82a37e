"""Capability table mapping each provider to the client that refreshes its tokens."""

from loguru import logger

from src.accounts.core.errors import RefreshError, RefreshErrorReason
from src.accounts.entities.core.identity import Provider
from src.accounts.runtime.config.config_data import ConfigData

from .base import ProviderClient
from .oauth_client import OAuthProviderClient


class ProviderClientRegistry:
    """Provider -> ProviderClient lookup.

    Tests register fakes in place of the HTTP clients.
    """

    def __init__(self, clients: dict[Provider, ProviderClient] | None = None):
        self._clients: dict[Provider, ProviderClient] = dict(clients or {})

    @classmethod
    def from_config(cls, config: ConfigData) -> "ProviderClientRegistry":
        """Build an HTTP client for every enabled provider in the configuration."""
        registry = cls()
        for name, provider_config in config.providers.items():
            try:
                provider = Provider(name)
            except ValueError:
                logger.warning("Ignoring configuration for unknown provider '{}'", name)
                continue
            if provider_config.enabled:
                registry.register(OAuthProviderClient(provider, provider_config))
        return registry

    def register(self, client: ProviderClient) -> None:
        self._clients[client.provider] = client

    def supports(self, provider: Provider) -> bool:
        return provider in self._clients

    def get(self, provider: Provider) -> ProviderClient:
        client = self._clients.get(provider)
        if client is None:
            raise RefreshError(
                RefreshErrorReason.NOT_CONFIGURED,
                f"No token refresh client configured for {provider}",
            )
        return client
