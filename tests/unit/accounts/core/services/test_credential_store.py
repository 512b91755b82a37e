"""Unit tests for the credential store."""

import pytest

from src.accounts.core.errors import ConflictError, NotFoundError, StaleCredentialError
from src.accounts.core.services.credentials import CredentialStore
from src.accounts.core.services.database.db_session import DbSessionService
from src.accounts.entities.core.identity import Identity, Provider
from src.accounts.entities.core.user import User, UserRepository


@pytest.fixture
def user(db_service: DbSessionService) -> User:
    with db_service.session_scope() as session:
        return UserRepository(session).create(User(email="Streamer@Example.com", handle="streamer"))


@pytest.fixture
def google_credential(credential_store: CredentialStore, user: User) -> Identity:
    return credential_store.create_credential(
        Identity(
            user_id=user.id,
            provider=Provider.GOOGLE,
            provider_id="g-1",
            provider_email="streamer@example.com",
            provider_token="T1",
            provider_refresh_token="R1",
        )
    )


class TestFindCredential:
    def test_absent(self, credential_store: CredentialStore, user: User):
        assert credential_store.find_credential(user.id, Provider.GOOGLE) is None
        assert not credential_store.has_credential(user.id, Provider.GOOGLE)

    def test_present(self, credential_store: CredentialStore, user: User, google_credential: Identity):
        found = credential_store.find_credential(user.id, Provider.GOOGLE)

        assert found is not None
        assert found.provider_token == "T1"
        assert credential_store.has_credential(user.id, Provider.GOOGLE)
        assert not credential_store.has_credential(user.id, Provider.RESTREAM)


class TestCreateCredential:
    def test_second_credential_for_same_provider_conflicts(
        self, credential_store: CredentialStore, user: User, google_credential: Identity
    ):
        with pytest.raises(ConflictError):
            credential_store.create_credential(
                Identity(user_id=user.id, provider=Provider.GOOGLE, provider_token="other")
            )

        assert credential_store.find_credential(user.id, Provider.GOOGLE).provider_token == "T1"


class TestUpsertCredentialTokens:
    def test_writes_both_fields(
        self, credential_store: CredentialStore, user: User, google_credential: Identity
    ):
        identity = credential_store.upsert_credential_tokens(
            user.id, Provider.GOOGLE, "T2", refresh_token="R2"
        )

        assert (identity.provider_token, identity.provider_refresh_token) == ("T2", "R2")
        stored = credential_store.find_credential(user.id, Provider.GOOGLE)
        assert (stored.provider_token, stored.provider_refresh_token) == ("T2", "R2")

    def test_absent_refresh_token_keeps_stored_one(
        self, credential_store: CredentialStore, user: User, google_credential: Identity
    ):
        identity = credential_store.upsert_credential_tokens(user.id, Provider.GOOGLE, "T2")

        assert (identity.provider_token, identity.provider_refresh_token) == ("T2", "R1")

    def test_missing_row_is_not_created(self, credential_store: CredentialStore, user: User):
        with pytest.raises(NotFoundError):
            credential_store.upsert_credential_tokens(user.id, Provider.RESTREAM, "T")

        assert credential_store.find_credential(user.id, Provider.RESTREAM) is None

    def test_stale_expected_refresh_token(
        self, credential_store: CredentialStore, user: User, google_credential: Identity
    ):
        with pytest.raises(StaleCredentialError):
            credential_store.upsert_credential_tokens(
                user.id, Provider.GOOGLE, "T9", refresh_token="R9", expected_refresh_token="R0"
            )

        stored = credential_store.find_credential(user.id, Provider.GOOGLE)
        assert (stored.provider_token, stored.provider_refresh_token) == ("T1", "R1")


class TestFindUserByProviderIdentity:
    def test_email_keyed_provider_ignores_case(
        self, credential_store: CredentialStore, user: User, google_credential: Identity
    ):
        found = credential_store.find_user_by_provider_identity(Provider.GOOGLE, "STREAMER@example.COM")

        assert found is not None
        assert found.id == user.id

    def test_email_keyed_provider_requires_link(self, credential_store: CredentialStore, user: User):
        assert credential_store.find_user_by_provider_identity(Provider.GITHUB, user.email) is None

    def test_id_keyed_provider_matches_exactly(self, credential_store: CredentialStore, user: User):
        credential_store.create_credential(
            Identity(user_id=user.id, provider=Provider.RESTREAM, provider_id="RS-7", provider_token="t")
        )

        assert credential_store.find_user_by_provider_identity(Provider.RESTREAM, "RS-7").id == user.id
        assert credential_store.find_user_by_provider_identity(Provider.RESTREAM, "rs-7") is None
