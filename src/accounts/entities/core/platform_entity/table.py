"""PlatformEntity database table model."""

from typing import Any

from sqlalchemy import JSON, Column, String, UniqueConstraint
from sqlmodel import Field

from src.accounts.entities.core._base import EntityTable


class PlatformEntityTable(EntityTable, table=True):
    """Database persistence model for platform entities."""

    __table_args__ = (
        UniqueConstraint("platform", "platform_id", name="uq_entity_platform_account"),
        UniqueConstraint("handle", name="uq_entity_handle"),
    )

    platform: str = Field(sa_column=Column(String(64), nullable=False, index=True))
    platform_id: str = Field(sa_column=Column(String(255), nullable=False))
    handle: str = Field(sa_column=Column(String(255), nullable=False))
    user_id: str | None = Field(default=None, foreign_key="usertable.id", index=True)
    name: str | None = None
    avatar_url: str | None = None
    platform_meta: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
