"""Entities module with hybrid entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .core.identity import Identity, IdentityRepository, IdentityTable, Provider
from .core.platform_entity import (
    PlatformEntity,
    PlatformEntityRepository,
    PlatformEntityTable,
)
from .core.user import User, UserRepository, UserTable, UserWithIdentities

__all__ = [
    "User",
    "UserTable",
    "UserRepository",
    "UserWithIdentities",
    "Identity",
    "IdentityTable",
    "IdentityRepository",
    "Provider",
    "PlatformEntity",
    "PlatformEntityTable",
    "PlatformEntityRepository",
]
