"""Provider clients for refreshing OAuth tokens."""

from .base import ProviderClient, TokenPair
from .oauth_client import OAuthProviderClient
from .registry import ProviderClientRegistry

__all__ = [
    "OAuthProviderClient",
    "ProviderClient",
    "ProviderClientRegistry",
    "TokenPair",
]
