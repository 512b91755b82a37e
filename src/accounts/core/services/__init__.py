"""Core services exports."""

# Database Service
from .database.db_session import DbSessionService

# Credential Services
from .credentials import CredentialStore, TokenRefresher

# Provider Clients
from .providers import OAuthProviderClient, ProviderClientRegistry, TokenPair

# User Services
from .user import AccountLinker, EntityResolver, ProviderProfile, StreamKeyService, is_admin

__all__ = [
    # Database Service
    "DbSessionService",
    # Credential Services
    "CredentialStore",
    "TokenRefresher",
    # Provider Clients
    "OAuthProviderClient",
    "ProviderClientRegistry",
    "TokenPair",
    # User Services
    "AccountLinker",
    "EntityResolver",
    "ProviderProfile",
    "StreamKeyService",
    "is_admin",
]
