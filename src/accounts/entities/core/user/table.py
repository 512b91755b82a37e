"""User database table model."""

from sqlalchemy import Column, String
from sqlmodel import Field

from src.accounts.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    Emails are stored lower case so the unique index enforces
    case-insensitive uniqueness.
    """

    email: str | None = Field(
        default=None, sa_column=Column(String(320), nullable=True, unique=True, index=True)
    )
    handle: str | None = Field(default=None, index=True)
    name: str | None = None
    avatar_url: str | None = None
    stream_key: str | None = Field(default=None, sa_column=Column(String(64), nullable=True))
