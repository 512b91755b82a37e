"""Link external provider accounts to canonical users."""

from typing import Any

from loguru import logger
from pydantic import BaseModel, Field
from sqlmodel import Session

from src.accounts.core.errors import ConflictError, NotFoundError
from src.accounts.core.services.database.db_session import DbSessionService
from src.accounts.core.services.database.db_utils import translate_store_errors
from src.accounts.core.services.providers import TokenPair
from src.accounts.entities.core.identity import Identity, IdentityRepository, Provider
from src.accounts.entities.core.user import User, UserRepository, UserWithIdentities


class ProviderProfile(BaseModel):
    """Profile of the external account, as reported by the provider."""

    provider_id: str | None = Field(default=None, description="Stable account id at the provider")
    email: str | None = None
    login: str | None = None
    name: str | None = None
    avatar_url: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)


class AccountLinker:
    """Creates users and identities from provider logins and links.

    A user and its first identity are written in one unit of work: both
    commit or neither does.
    """

    def __init__(self, db: DbSessionService):
        self._db = db

    def link_or_create(
        self,
        provider: Provider,
        primary_identity: str,
        profile: ProviderProfile,
        tokens: TokenPair,
        target_user_id: str | None = None,
    ) -> UserWithIdentities:
        """Link a provider account, creating the user on first sight.

        Args:
            provider: Provider the account belongs to
            primary_identity: Email for email-keyed providers, the provider's
                account id otherwise
            profile: Provider profile used to build new rows
            tokens: Tokens obtained from the provider's OAuth callback
            target_user_id: Signed-in user to attach a secondary provider to

        Returns:
            The user with its identities freshly reloaded

        Raises:
            NotFoundError: ``target_user_id`` does not exist
            ConflictError: The account is linked to a different user, or a
                concurrent registration could not be reconciled
        """
        for attempt in (1, 2):
            try:
                with translate_store_errors("link_or_create"), self._db.session_scope() as session:
                    user = self._link(session, provider, primary_identity, profile, tokens, target_user_id)
                break
            except ConflictError:
                if attempt == 2 or target_user_id is not None:
                    raise
                # A concurrent registration won; the second pass finds its user
                logger.info("Concurrent {} registration detected, retrying lookup", provider)

        with translate_store_errors("link_or_create"), self._db.session_scope() as session:
            return UserRepository(session).get_with_identities(user.id)

    def _link(
        self,
        session: Session,
        provider: Provider,
        primary_identity: str,
        profile: ProviderProfile,
        tokens: TokenPair,
        target_user_id: str | None,
    ) -> User:
        users = UserRepository(session)
        identities = IdentityRepository(session)

        if provider.keyed_by_email and not profile.email and primary_identity:
            # The primary identity is the email for these providers
            profile = profile.model_copy(update={"email": primary_identity})

        if target_user_id is not None:
            user = users.get(target_user_id)
            if user is None:
                raise NotFoundError("User", target_user_id)
            if identities.get_for_user(user.id, provider) is not None:
                self._update_tokens(identities, user, provider, tokens)
            else:
                identities.create(self._build_identity(user, provider, profile, tokens))
                logger.info("Linked {} account to user {}", provider, user.id)
            return user

        if provider.keyed_by_email:
            user = users.get_by_provider_email(provider, primary_identity)
        else:
            user = users.get_by_provider_id(provider, primary_identity)
        if user is None and profile.provider_id:
            # Email changed at the provider since the account was linked
            user = users.get_by_provider_id(provider, profile.provider_id)
        if user is not None:
            self._update_tokens(identities, user, provider, tokens)
            return user

        user = users.get_by_email(profile.email) if profile.email else None
        if user is not None:
            identities.create(self._build_identity(user, provider, profile, tokens))
            logger.info("Attached {} account to existing user {}", provider, user.id)
            return user

        user = users.create(
            User(
                email=profile.email,
                handle=profile.login,
                name=profile.name or profile.login,
                avatar_url=profile.avatar_url,
            )
        )
        identities.create(self._build_identity(user, provider, profile, tokens))
        logger.info("Registered user {} via {}", user.id, provider)
        return user

    @staticmethod
    def _update_tokens(
        identities: IdentityRepository, user: User, provider: Provider, tokens: TokenPair
    ) -> None:
        identities.update_tokens(
            user.id, provider, tokens.access_token, refresh_token=tokens.refresh_token
        )
        logger.info("Updated {} tokens for user {}", provider, user.id)

    @staticmethod
    def _build_identity(
        user: User, provider: Provider, profile: ProviderProfile, tokens: TokenPair
    ) -> Identity:
        return Identity(
            user_id=user.id,
            provider=provider,
            provider_id=profile.provider_id,
            provider_email=profile.email,
            provider_login=profile.login,
            provider_token=tokens.access_token,
            provider_refresh_token=tokens.refresh_token,
            provider_meta=profile.meta,
        )

    def register_github_user(
        self,
        primary_email: str,
        profile: ProviderProfile,
        emails: list[str],
        token: str,
    ) -> UserWithIdentities:
        """Sign a user in with GitHub, registering them on first login.

        GitHub access tokens never expire and come without a refresh token.
        """
        profile = profile.model_copy(
            update={
                "email": primary_email,
                "meta": {**profile.meta, "emails": emails},
            }
        )
        return self.link_or_create(
            Provider.GITHUB, primary_email, profile, TokenPair(access_token=token)
        )

    def link_restream_account(
        self, user_id: str, profile: ProviderProfile, tokens: TokenPair
    ) -> UserWithIdentities:
        """Attach (or re-authorize) a Restream account for a signed-in user."""
        return self._link_secondary(Provider.RESTREAM, user_id, profile, tokens)

    def link_google_account(
        self, user_id: str, profile: ProviderProfile, tokens: TokenPair
    ) -> UserWithIdentities:
        """Attach (or re-authorize) a Google account for a signed-in user."""
        return self._link_secondary(Provider.GOOGLE, user_id, profile, tokens)

    def _link_secondary(
        self, provider: Provider, user_id: str, profile: ProviderProfile, tokens: TokenPair
    ) -> UserWithIdentities:
        primary = profile.email if provider.keyed_by_email else profile.provider_id
        return self.link_or_create(
            provider, primary or "", profile, tokens, target_user_id=user_id
        )
