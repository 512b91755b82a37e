"""Identity database table model."""

from typing import Any

from sqlalchemy import JSON, Column, String, Text, UniqueConstraint
from sqlmodel import Field

from src.accounts.entities.core._base import EntityTable


class IdentityTable(EntityTable, table=True):
    """Database persistence model for provider identities."""

    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_identity_user_provider"),
        UniqueConstraint("provider", "provider_id", name="uq_identity_provider_account"),
    )

    user_id: str = Field(foreign_key="usertable.id", index=True)
    provider: str = Field(sa_column=Column(String(32), nullable=False, index=True))
    provider_id: str | None = Field(
        default=None, sa_column=Column(String(255), nullable=True, index=True)
    )
    provider_email: str | None = Field(
        default=None, sa_column=Column(String(320), nullable=True, index=True)
    )
    provider_login: str | None = None
    provider_token: str = Field(sa_column=Column(Text, nullable=False))
    provider_refresh_token: str | None = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    provider_meta: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
