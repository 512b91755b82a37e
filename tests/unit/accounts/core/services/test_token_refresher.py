"""Unit tests for the provider token refresher."""

from unittest.mock import patch

import pytest
from sqlalchemy import delete

from src.accounts.core.errors import (
    NotFoundError,
    ProviderRefreshFailed,
    RefreshError,
    RefreshErrorReason,
)
from src.accounts.core.services.credentials import CredentialStore, TokenRefresher
from src.accounts.core.services.database.db_session import DbSessionService
from src.accounts.core.services.providers import ProviderClientRegistry
from src.accounts.entities.core.identity import Identity, IdentityTable, Provider
from src.accounts.entities.core.user import User, UserRepository
from src.accounts.runtime.config.config_data import ConfigData
from tests.fixtures.dummies import FakeProviderClient


@pytest.fixture
def user(db_service: DbSessionService) -> User:
    with db_service.session_scope() as session:
        return UserRepository(session).create(User(email="streamer@example.com"))


@pytest.fixture
def google_credential(credential_store: CredentialStore, user: User) -> Identity:
    return credential_store.create_credential(
        Identity(
            user_id=user.id,
            provider=Provider.GOOGLE,
            provider_token="T1",
            provider_refresh_token="R1",
        )
    )


class TestRefresh:
    """``refresh`` only talks to the provider."""

    @pytest.mark.asyncio
    async def test_returns_new_pair(
        self, token_refresher: TokenRefresher, fake_google_client: FakeProviderClient
    ):
        fake_google_client.issue("R1", "T2", "R2")

        tokens = await token_refresher.refresh(Provider.GOOGLE, "R1")

        assert (tokens.access_token, tokens.refresh_token) == ("T2", "R2")

    @pytest.mark.asyncio
    async def test_rejected_token(self, token_refresher: TokenRefresher):
        with pytest.raises(ProviderRefreshFailed) as exc_info:
            await token_refresher.refresh(Provider.GOOGLE, "unknown")

        assert exc_info.value.reason is RefreshErrorReason.PROVIDER_REJECTED

    @pytest.mark.asyncio
    async def test_network_failure_reason_preserved(
        self, token_refresher: TokenRefresher, fake_google_client: FakeProviderClient
    ):
        fake_google_client.error = RefreshError(RefreshErrorReason.NETWORK, "timeout")

        with pytest.raises(ProviderRefreshFailed) as exc_info:
            await token_refresher.refresh(Provider.GOOGLE, "R1")

        assert exc_info.value.reason is RefreshErrorReason.NETWORK

    @pytest.mark.asyncio
    async def test_unconfigured_provider(self, token_refresher: TokenRefresher):
        with pytest.raises(ProviderRefreshFailed) as exc_info:
            await token_refresher.refresh(Provider.GITHUB, "R1")

        assert exc_info.value.reason is RefreshErrorReason.NOT_CONFIGURED


class TestRefreshCredential:
    @pytest.mark.asyncio
    async def test_rotation_scenario(
        self,
        token_refresher: TokenRefresher,
        credential_store: CredentialStore,
        fake_google_client: FakeProviderClient,
        user: User,
        google_credential: Identity,
    ):
        """R1 -> (T2, R2) is stored, and R1 can't be used again."""
        fake_google_client.issue("R1", "T2", "R2")

        tokens = await token_refresher.refresh_credential(user.id, Provider.GOOGLE)

        assert tokens.access_token == "T2"
        stored = credential_store.find_credential(user.id, Provider.GOOGLE)
        assert (stored.provider_token, stored.provider_refresh_token) == ("T2", "R2")

        with pytest.raises(ProviderRefreshFailed):
            await token_refresher.refresh(Provider.GOOGLE, "R1")

    @pytest.mark.asyncio
    async def test_unrotated_refresh_token_kept(
        self,
        token_refresher: TokenRefresher,
        credential_store: CredentialStore,
        fake_google_client: FakeProviderClient,
        user: User,
        google_credential: Identity,
    ):
        fake_google_client.issue("R1", "T2", None)

        await token_refresher.refresh_credential(user.id, Provider.GOOGLE)

        stored = credential_store.find_credential(user.id, Provider.GOOGLE)
        assert (stored.provider_token, stored.provider_refresh_token) == ("T2", "R1")

    @pytest.mark.asyncio
    async def test_failed_refresh_leaves_store_untouched(
        self,
        token_refresher: TokenRefresher,
        credential_store: CredentialStore,
        user: User,
        google_credential: Identity,
    ):
        with pytest.raises(ProviderRefreshFailed):
            await token_refresher.refresh_credential(user.id, Provider.GOOGLE)

        stored = credential_store.find_credential(user.id, Provider.GOOGLE)
        assert (stored.provider_token, stored.provider_refresh_token) == ("T1", "R1")

    @pytest.mark.asyncio
    async def test_concurrent_rotation_is_detected(
        self,
        token_refresher: TokenRefresher,
        credential_store: CredentialStore,
        fake_google_client: FakeProviderClient,
        user: User,
        google_credential: Identity,
    ):
        """A rotation that lands during the exchange makes this write fail, not mix."""
        fake_google_client.issue("R1", "T2", "R2")
        fake_google_client.before_return = lambda: credential_store.upsert_credential_tokens(
            user.id, Provider.GOOGLE, "T9", refresh_token="R9"
        )

        with pytest.raises(ProviderRefreshFailed) as exc_info:
            await token_refresher.refresh_credential(user.id, Provider.GOOGLE)

        assert exc_info.value.reason is RefreshErrorReason.STALE
        stored = credential_store.find_credential(user.id, Provider.GOOGLE)
        assert (stored.provider_token, stored.provider_refresh_token) == ("T9", "R9")

    @pytest.mark.asyncio
    async def test_missing_credential(self, token_refresher: TokenRefresher, user: User):
        with pytest.raises(NotFoundError):
            await token_refresher.refresh_credential(user.id, Provider.GOOGLE)

    @pytest.mark.asyncio
    async def test_credential_without_refresh_token(
        self,
        token_refresher: TokenRefresher,
        credential_store: CredentialStore,
        fake_restream_client: FakeProviderClient,
        user: User,
    ):
        credential_store.create_credential(
            Identity(user_id=user.id, provider=Provider.RESTREAM, provider_token="T1")
        )

        with pytest.raises(ProviderRefreshFailed):
            await token_refresher.refresh_credential(user.id, Provider.RESTREAM)

        assert fake_restream_client.calls == []


class TestGetLiveToken:
    @pytest.mark.asyncio
    async def test_no_credential_returns_none(
        self, token_refresher: TokenRefresher, fake_google_client: FakeProviderClient, user: User
    ):
        assert await token_refresher.get_live_token(user.id, Provider.GOOGLE) is None
        assert fake_google_client.calls == []

    @pytest.mark.asyncio
    async def test_always_refreshes(
        self,
        token_refresher: TokenRefresher,
        fake_google_client: FakeProviderClient,
        user: User,
        google_credential: Identity,
    ):
        fake_google_client.issue("R1", "T2", "R2")
        fake_google_client.issue("R2", "T3", "R3")

        assert await token_refresher.get_live_token(user.id, Provider.GOOGLE) == "T2"
        assert await token_refresher.get_live_token(user.id, Provider.GOOGLE) == "T3"
        assert fake_google_client.calls == ["R1", "R2"]

    @pytest.mark.asyncio
    async def test_credential_read_once(
        self,
        token_refresher: TokenRefresher,
        credential_store: CredentialStore,
        fake_google_client: FakeProviderClient,
        user: User,
        google_credential: Identity,
    ):
        fake_google_client.issue("R1", "T2", "R2")

        with patch.object(
            credential_store, "find_credential", wraps=credential_store.find_credential
        ) as find_credential:
            assert await token_refresher.get_live_token(user.id, Provider.GOOGLE) == "T2"

        assert find_credential.call_count == 1

    @pytest.mark.asyncio
    async def test_credential_removed_during_exchange(
        self,
        token_refresher: TokenRefresher,
        db_service: DbSessionService,
        fake_google_client: FakeProviderClient,
        user: User,
        google_credential: Identity,
    ):
        def remove_credential():
            with db_service.session_scope() as session:
                session.exec(delete(IdentityTable).where(IdentityTable.user_id == user.id))

        fake_google_client.issue("R1", "T2", "R2")
        fake_google_client.before_return = remove_credential

        assert await token_refresher.get_live_token(user.id, Provider.GOOGLE) is None

    @pytest.mark.asyncio
    async def test_failure_returns_none(
        self, token_refresher: TokenRefresher, user: User, google_credential: Identity
    ):
        assert await token_refresher.get_live_token(user.id, Provider.GOOGLE) is None

    @pytest.mark.asyncio
    async def test_or_raise_variant_surfaces_reason(
        self, token_refresher: TokenRefresher, user: User, google_credential: Identity
    ):
        with pytest.raises(ProviderRefreshFailed) as exc_info:
            await token_refresher.get_live_token_or_raise(user.id, Provider.GOOGLE)

        assert exc_info.value.reason is RefreshErrorReason.PROVIDER_REJECTED


class TestWebsocketUrl:
    @pytest.mark.asyncio
    async def test_restream_url_uses_live_token(
        self,
        token_refresher: TokenRefresher,
        credential_store: CredentialStore,
        fake_restream_client: FakeProviderClient,
        user: User,
    ):
        credential_store.create_credential(
            Identity(
                user_id=user.id,
                provider=Provider.RESTREAM,
                provider_id="rs-1",
                provider_token="T1",
                provider_refresh_token="R1",
            )
        )
        fake_restream_client.issue("R1", "T2", "R2")

        url = await token_refresher.restream_websocket_url(user.id)

        assert url == "wss://chat.test/ws?accessToken=T2"

    @pytest.mark.asyncio
    async def test_no_restream_credential(self, token_refresher: TokenRefresher, user: User):
        assert await token_refresher.restream_websocket_url(user.id) is None

    @pytest.mark.asyncio
    async def test_provider_without_template(
        self, token_refresher: TokenRefresher, user: User, google_credential: Identity
    ):
        assert await token_refresher.websocket_url(user.id, Provider.GOOGLE) is None


class TestFromConfig:
    def test_wires_http_clients_and_templates(
        self, credential_store: CredentialStore, accounts_test_config: ConfigData
    ):
        refresher = TokenRefresher.from_config(credential_store, accounts_test_config)

        assert refresher._clients.supports(Provider.GOOGLE)
        assert refresher._clients.supports(Provider.RESTREAM)
        assert refresher._websocket_urls == {
            Provider.RESTREAM: "wss://chat.test/ws?accessToken={token}"
        }

    def test_registry_can_be_replaced(self, credential_store: CredentialStore):
        client = FakeProviderClient(Provider.GITHUB)
        refresher = TokenRefresher(credential_store, ProviderClientRegistry({Provider.GITHUB: client}))

        assert refresher._clients.get(Provider.GITHUB) is client
