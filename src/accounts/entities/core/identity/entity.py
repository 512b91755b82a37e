"""Identity domain entity."""

from enum import StrEnum
from typing import Any

from pydantic import Field

from src.accounts.entities.core._base import Entity


class Provider(StrEnum):
    """External providers a user can link."""

    GITHUB = "github"
    GOOGLE = "google"
    RESTREAM = "restream"

    @property
    def keyed_by_email(self) -> bool:
        """Whether accounts from this provider are matched to users by email."""
        return self in (Provider.GITHUB, Provider.GOOGLE)


class Identity(Entity):
    """A user's credential with one external provider.

    There is at most one identity per (user, provider). Token fields are never
    included in the repr.
    """

    user_id: str = Field(description="Internal user ID this identity belongs to")
    provider: Provider = Field(description="External provider")
    provider_id: str | None = Field(
        default=None, description="Stable account id assigned by the provider"
    )
    provider_email: str | None = Field(default=None, description="Email reported by the provider")
    provider_login: str | None = Field(default=None, description="Login or username at the provider")
    provider_token: str = Field(repr=False, description="Current access token")
    provider_refresh_token: str | None = Field(
        default=None, repr=False, description="Current refresh token, if the provider issues one"
    )
    provider_meta: dict[str, Any] = Field(
        default_factory=dict, description="Raw profile data returned by the provider"
    )
