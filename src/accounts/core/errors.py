"""Error types raised by the account and credential services.

Every error carries a machine-readable ``code``, a human ``message`` and a
``details`` dict. Token values never appear in any of them.
"""

from enum import StrEnum
from typing import Any


class AccountsError(Exception):
    """Base error with a consistent shape."""

    code = "ACCOUNTS_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class NotFoundError(AccountsError):
    """A referenced record does not exist."""

    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str | None = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} '{identifier}' not found"
        super().__init__(message, {"resource": resource, "identifier": identifier})
        self.resource = resource
        self.identifier = identifier


class ConflictError(AccountsError):
    """A write would violate a uniqueness rule."""

    code = "CONFLICT"


class StaleCredentialError(ConflictError):
    """The stored refresh token changed between read and write."""

    code = "STALE_CREDENTIAL"


class StoreFailure(AccountsError):
    """The persistence layer failed for a reason other than a known conflict."""

    code = "STORE_FAILURE"


class RefreshErrorReason(StrEnum):
    PROVIDER_REJECTED = "provider_rejected"
    NETWORK = "network"
    MALFORMED = "malformed"
    STALE = "stale"
    NOT_CONFIGURED = "not_configured"


class RefreshError(AccountsError):
    """A provider client could not exchange a refresh token."""

    code = "REFRESH_ERROR"

    def __init__(
        self,
        reason: RefreshErrorReason,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, {"reason": reason.value, **(details or {})})
        self.reason = reason


class ProviderRefreshFailed(RefreshError):
    """Refreshing a stored credential failed; ``reason`` says why."""

    code = "PROVIDER_REFRESH_FAILED"

    def __init__(
        self,
        provider: str,
        reason: RefreshErrorReason,
        message: str | None = None,
    ):
        super().__init__(
            reason,
            message or f"Refreshing {provider} credential failed: {reason.value}",
            {"provider": str(provider)},
        )
        self.provider = provider
