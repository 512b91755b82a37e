"""User repository for data access operations."""

from collections.abc import Iterable

from sqlalchemy import func
from sqlmodel import Session, select

from src.accounts.entities.core.identity.entity import Identity, Provider
from src.accounts.entities.core.identity.table import IdentityTable

from .entity import User, UserWithIdentities
from .table import UserTable


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_by_email(self, email: str) -> User | None:
        """Look a user up by email, ignoring case."""
        statement = select(UserTable).where(
            func.lower(UserTable.email) == email.strip().lower()
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_by_provider_email(self, provider: Provider, email: str) -> User | None:
        """Find a user linked to ``provider`` whose email matches, ignoring case."""
        statement = (
            select(UserTable)
            .join(IdentityTable, IdentityTable.user_id == UserTable.id)
            .where(
                IdentityTable.provider == provider.value,
                func.lower(UserTable.email) == email.strip().lower(),
            )
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_by_provider_id(self, provider: Provider, provider_id: str) -> User | None:
        """Find the user owning the ``provider`` account with the given external id."""
        statement = (
            select(UserTable)
            .join(IdentityTable, IdentityTable.user_id == UserTable.id)
            .where(
                IdentityTable.provider == provider.value,
                IdentityTable.provider_id == provider_id,
            )
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_with_identities(self, user_id: str) -> UserWithIdentities | None:
        """Load a user together with a fresh read of its identities."""
        row = self._session.get(UserTable, user_id, populate_existing=True)
        if row is None:
            return None
        statement = (
            select(IdentityTable)
            .where(IdentityTable.user_id == user_id)
            .order_by(IdentityTable.created_at)
            .execution_options(populate_existing=True)
        )
        identities = [
            Identity.model_validate(identity, from_attributes=True)
            for identity in self._session.exec(statement).all()
        ]
        user = User.model_validate(row, from_attributes=True)
        return UserWithIdentities(**user.model_dump(), identities=identities)

    def list_all(self, limit: int = 100, offset: int = 0) -> list[User]:
        statement = (
            select(UserTable).order_by(UserTable.created_at).offset(offset).limit(limit)
        )
        return [
            User.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]

    def get_many(self, user_ids: Iterable[str]) -> dict[str, User]:
        """Return the users with the given ids keyed by id; unknown ids are skipped."""
        ids = list(set(user_ids))
        if not ids:
            return {}
        statement = select(UserTable).where(UserTable.id.in_(ids))
        return {
            row.id: User.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        }

    def create(self, user: User) -> User:
        self._session.add(UserTable.model_validate(user, from_attributes=True))
        self._session.flush()
        return user

    def update(self, user: User) -> User:
        row = self._session.get(UserTable, user.id)
        if row is None:
            raise ValueError(f"User {user.id} not found")
        for field, value in user.model_dump(
            include={"email", "handle", "name", "avatar_url", "stream_key"}
        ).items():
            setattr(row, field, value)
        self._session.add(row)
        self._session.flush()
        return User.model_validate(row, from_attributes=True)
