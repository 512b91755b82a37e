"""User domain entity."""

from typing import Any

from pydantic import Field, field_validator

from src.accounts.entities.core._base import Entity
from src.accounts.entities.core.identity.entity import Identity, Provider


class User(Entity):
    """User entity representing a person in the system.

    A user is created once, by the first provider link, and every later
    provider link attaches an identity to the same record.
    """

    email: str | None = Field(default=None, description="Primary email, stored lower case")
    handle: str | None = Field(default=None, description="Public handle")
    name: str | None = Field(default=None, description="Display name")
    avatar_url: str | None = Field(default=None, description="Avatar image URL")
    stream_key: str | None = Field(
        default=None,
        repr=False,
        description="Digest issued as the user's stream key",
    )

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.email == other.email
            and self.handle == other.handle
            and self.name == other.name
            and self.avatar_url == other.avatar_url
            and self.stream_key == other.stream_key
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((self.id, self.email, self.handle, self.name, self.avatar_url))


class UserWithIdentities(User):
    """User together with the provider identities linked to it."""

    identities: list[Identity] = Field(default_factory=list)

    def identity_for(self, provider: Provider) -> Identity | None:
        return next((i for i in self.identities if i.provider == provider), None)
