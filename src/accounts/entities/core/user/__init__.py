"""User entity module.

- User: Canonical person record
- UserWithIdentities: User plus its linked provider identities
- UserTable: Database persistence model
- UserRepository: Data access layer
"""

from .entity import User, UserWithIdentities
from .repository import UserRepository
from .table import UserTable

__all__ = ["User", "UserWithIdentities", "UserTable", "UserRepository"]
