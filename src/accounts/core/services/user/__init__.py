"""User-facing account services."""

from .account_linker import AccountLinker, ProviderProfile
from .admin import is_admin
from .entity_resolver import EntityResolver
from .stream_keys import StreamKeyService

__all__ = [
    "AccountLinker",
    "EntityResolver",
    "ProviderProfile",
    "StreamKeyService",
    "is_admin",
]
