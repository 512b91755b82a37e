"""Shared utilities for CLI commands."""

from functools import lru_cache

from rich.console import Console

from src.accounts.core.services.database.db_session import DbSessionService

console = Console()


@lru_cache(maxsize=1)
def get_db() -> DbSessionService:
    """Database service shared by every command in one process."""
    return DbSessionService()
