"""Identity repository for data access operations."""

from sqlalchemy import func, update
from sqlmodel import Session, select

from src.accounts.entities.core._base import utc_now

from .entity import Identity, Provider
from .table import IdentityTable


class IdentityRepository:
    """Data-access layer for provider identities."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _first(self, statement) -> Identity | None:
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Identity.model_validate(row, from_attributes=True)

    def get(self, identity_id: str) -> Identity | None:
        row = self._session.get(IdentityTable, identity_id)
        if row is None:
            return None
        return Identity.model_validate(row, from_attributes=True)

    def get_for_user(self, user_id: str, provider: Provider) -> Identity | None:
        statement = (
            select(IdentityTable)
            .where(IdentityTable.user_id == user_id, IdentityTable.provider == provider.value)
            .execution_options(populate_existing=True)
        )
        return self._first(statement)

    def list_for_user(self, user_id: str) -> list[Identity]:
        statement = select(IdentityTable).where(IdentityTable.user_id == user_id)
        return [
            Identity.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]

    def get_by_provider_id(self, provider: Provider, provider_id: str) -> Identity | None:
        statement = select(IdentityTable).where(
            IdentityTable.provider == provider.value,
            IdentityTable.provider_id == provider_id,
        )
        return self._first(statement)

    def get_by_provider_email(self, provider: Provider, email: str) -> Identity | None:
        """Find an identity by the email the provider reported, ignoring case."""
        statement = select(IdentityTable).where(
            IdentityTable.provider == provider.value,
            func.lower(IdentityTable.provider_email) == email.strip().lower(),
        )
        return self._first(statement)

    def create(self, identity: Identity) -> Identity:
        data = identity.model_dump()
        data["provider"] = identity.provider.value
        self._session.add(IdentityTable(**data))
        self._session.flush()
        return identity

    def update_tokens(
        self,
        user_id: str,
        provider: Provider,
        token: str,
        refresh_token: str | None = None,
        expected_refresh_token: str | None = None,
    ) -> int:
        """Write both token fields of one identity in a single UPDATE statement.

        ``refresh_token=None`` keeps the stored refresh token. When
        ``expected_refresh_token`` is given the row only matches while its
        stored refresh token still equals it.

        Returns:
            Number of rows updated (0 or 1)
        """
        values = {"provider_token": token, "updated_at": utc_now()}
        if refresh_token is not None:
            values["provider_refresh_token"] = refresh_token

        statement = update(IdentityTable).where(
            IdentityTable.user_id == user_id,
            IdentityTable.provider == provider.value,
        )
        if expected_refresh_token is not None:
            statement = statement.where(
                IdentityTable.provider_refresh_token == expected_refresh_token
            )

        result = self._session.exec(statement.values(**values))
        return result.rowcount
