"""Durable storage of per-(user, provider) credentials."""

from loguru import logger

from src.accounts.core.errors import NotFoundError, StaleCredentialError
from src.accounts.core.services.database.db_session import DbSessionService
from src.accounts.core.services.database.db_utils import translate_store_errors
from src.accounts.entities.core.identity import Identity, IdentityRepository, Provider
from src.accounts.entities.core.user import User, UserRepository


class CredentialStore:
    """Reads and writes provider credentials.

    Every operation runs in its own short unit of work, so callers never hold
    a transaction open across a network call.
    """

    def __init__(self, db: DbSessionService):
        self._db = db

    def find_credential(self, user_id: str, provider: Provider) -> Identity | None:
        with translate_store_errors("find_credential"), self._db.session_scope() as session:
            return IdentityRepository(session).get_for_user(user_id, provider)

    def has_credential(self, user_id: str, provider: Provider) -> bool:
        return self.find_credential(user_id, provider) is not None

    def create_credential(self, identity: Identity) -> Identity:
        """Insert a new credential row.

        Raises:
            ConflictError: The user already has a credential for this provider, or
                the external account is linked to another user
        """
        with translate_store_errors("create_credential"), self._db.session_scope() as session:
            created = IdentityRepository(session).create(identity)
        logger.info("Linked {} credential to user {}", identity.provider, identity.user_id)
        return created

    def upsert_credential_tokens(
        self,
        user_id: str,
        provider: Provider,
        token: str,
        refresh_token: str | None = None,
        expected_refresh_token: str | None = None,
    ) -> Identity:
        """Atomically replace the token fields of an existing credential.

        Both fields are written by one UPDATE. ``refresh_token=None`` keeps the
        stored refresh token. With ``expected_refresh_token`` the write only
        applies while the stored refresh token still equals it.

        Raises:
            NotFoundError: No credential exists for (user_id, provider)
            StaleCredentialError: The stored refresh token no longer matches
                ``expected_refresh_token``
        """
        with translate_store_errors("upsert_credential_tokens"), self._db.session_scope() as session:
            identities = IdentityRepository(session)
            updated = identities.update_tokens(
                user_id,
                provider,
                token,
                refresh_token=refresh_token,
                expected_refresh_token=expected_refresh_token,
            )
            if updated == 0:
                # Raising inside the scope rolls the (empty) unit of work back
                if identities.get_for_user(user_id, provider) is None:
                    raise NotFoundError(f"{provider} credential", user_id)
                raise StaleCredentialError(
                    f"{provider} credential for user {user_id} was rotated concurrently",
                    {"user_id": user_id, "provider": str(provider)},
                )
            identity = identities.get_for_user(user_id, provider)

        logger.debug("Stored new {} tokens for user {}", provider, user_id)
        return identity

    def find_user_by_provider_identity(self, provider: Provider, email_or_id: str) -> User | None:
        """Find the user already linked to a provider account.

        Email-keyed providers match the user's email ignoring case; the others
        match the provider's stable account id exactly.
        """
        if provider.keyed_by_email:
            with translate_store_errors("find_user_by_provider_identity"), self._db.session_scope() as session:
                return UserRepository(session).get_by_provider_email(provider, email_or_id)
        return self.find_user_by_provider_id(provider, email_or_id)

    def find_user_by_provider_id(self, provider: Provider, provider_id: str) -> User | None:
        with translate_store_errors("find_user_by_provider_id"), self._db.session_scope() as session:
            return UserRepository(session).get_by_provider_id(provider, provider_id)
