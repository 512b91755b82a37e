"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

import os
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, field_validator


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./accounts.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured URL points at SQLite."""
        return self.url.startswith("sqlite")

    @property
    def connection_string(self) -> str:
        """Construct the database connection string, injecting the password if configured."""
        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)
        if self.is_sqlite or not self.password_env_var:
            return self.url

        password = os.getenv(self.password_env_var)
        if not password:
            raise ValueError(f"Environment variable {self.password_env_var} not set")

        if base_url.password:
            logger.warning(
                "Database URL already contains a password; using the one from {}",
                self.password_env_var,
            )
        return base_url.set(password=password).render_as_string(hide_password=False)


class ProviderConfig(BaseModel):
    """OAuth configuration for a single external provider."""

    token_endpoint: str = Field(description="OAuth token endpoint URL")
    client_id: str = Field(default="", description="Client ID registered with the provider")
    client_secret: str | None = Field(
        default=None, description="Client secret registered with the provider"
    )
    enabled: bool = Field(default=True, description="Enable token refresh for this provider")
    timeout_seconds: float = Field(default=10.0, description="HTTP timeout for token requests")
    websocket_url: str | None = Field(
        default=None,
        description="Websocket URL template; '{token}' is replaced with a live access token",
    )


def _default_providers() -> dict[str, ProviderConfig]:
    return {
        "github": ProviderConfig(
            token_endpoint="https://github.com/login/oauth/access_token",
        ),
        "google": ProviderConfig(
            token_endpoint="https://oauth2.googleapis.com/token",
        ),
        "restream": ProviderConfig(
            token_endpoint="https://api.restream.io/oauth/token",
            websocket_url="wss://chat.api.restream.io/ws?accessToken={token}",
        ),
    }


class AccountsConfig(BaseModel):
    """Account and entity behaviour configuration."""

    admin_emails: list[str] = Field(
        default_factory=list, description="Emails granted the admin role"
    )
    internal_platform: str = Field(
        default="internal",
        description="Platform name used for entities derived from local users",
    )
    stream_key_bytes: int = Field(
        default=32, description="Random bytes drawn for each stream key", ge=32
    )

    @field_validator("admin_emails", mode="before")
    @classmethod
    def _split_admin_emails(cls, value):
        # Allows a comma separated list from an environment variable
        if value is None:
            return []
        if isinstance(value, str):
            return [email.strip() for email in value.split(",") if email.strip()]
        return value


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    name: str = Field(default="accounts", description="Application name")


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    providers: dict[str, ProviderConfig] = Field(
        default_factory=_default_providers,
        description="OAuth provider configurations keyed by provider name",
    )
    accounts: AccountsConfig = Field(
        default_factory=AccountsConfig, description="Account behaviour configuration"
    )
