"""Credential storage and refresh services."""

from .credential_store import CredentialStore
from .token_refresher import TokenRefresher

__all__ = ["CredentialStore", "TokenRefresher"]
