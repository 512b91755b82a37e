"""Platform entity module.

A platform entity is a public profile keyed by (platform, platform_id), owned
by a local user or mirrored from an external platform.
"""

from .entity import PlatformEntity
from .repository import PlatformEntityRepository
from .table import PlatformEntityTable

__all__ = ["PlatformEntity", "PlatformEntityRepository", "PlatformEntityTable"]
