"""Identity entity module.

An identity is a user's credential with one external provider:
- Provider: Closed set of supported providers
- Identity: Domain entity holding the provider account and its tokens
- IdentityTable: Database persistence model
- IdentityRepository: Data access layer
"""

from .entity import Identity, Provider
from .repository import IdentityRepository
from .table import IdentityTable

__all__ = ["Identity", "IdentityTable", "IdentityRepository", "Provider"]
