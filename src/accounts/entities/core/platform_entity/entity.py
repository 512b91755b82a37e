"""Entity: PlatformEntity."""

from typing import Any

from pydantic import Field

from src.accounts.entities.core._base import Entity


class PlatformEntity(Entity):
    """Public profile for an account on some platform.

    ``handle`` is unique across every platform.
    """

    platform: str = Field(description="Platform the account lives on")
    platform_id: str = Field(description="Account id on that platform")
    handle: str = Field(description="Unique public handle")
    user_id: str | None = Field(default=None, description="Owning local user, if any")
    name: str | None = Field(default=None, description="Display name")
    avatar_url: str | None = Field(default=None, description="Avatar image URL")
    platform_meta: dict[str, Any] = Field(default_factory=dict)
