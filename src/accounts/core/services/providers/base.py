"""Provider client capability shared by all token refresh implementations."""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from src.accounts.entities.core.identity import Provider


class TokenPair(BaseModel):
    """Tokens returned by a provider's refresh exchange.

    ``refresh_token`` is None when the provider did not rotate it; the stored
    refresh token stays valid in that case.
    """

    access_token: str = Field(repr=False, min_length=1)
    refresh_token: str | None = Field(default=None, repr=False)
    token_type: str = "bearer"
    expires_in: int | None = None
    scope: str | None = None


@runtime_checkable
class ProviderClient(Protocol):
    """Exchanges a refresh token for a new token pair at one provider."""

    provider: Provider

    async def exchange_refresh_token(self, refresh_token: str) -> TokenPair:
        """Raise ``RefreshError`` when the exchange fails."""
        ...
