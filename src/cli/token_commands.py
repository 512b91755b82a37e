"""Provider credential CLI commands."""

import asyncio

import typer

from src.accounts.core.errors import AccountsError
from src.accounts.core.services.credentials import CredentialStore, TokenRefresher
from src.accounts.entities.core.identity import Provider
from src.accounts.runtime.context import get_config

from .utils import console, get_db

tokens_app = typer.Typer(help="Inspect and refresh provider credentials")


def _refresher() -> TokenRefresher:
    return TokenRefresher.from_config(CredentialStore(get_db()), get_config())


@tokens_app.command("status")
def token_status(
    user_id: str = typer.Argument(..., help="User ID"),
) -> None:
    """Show which providers the user holds credentials for."""
    store = CredentialStore(get_db())
    for provider in Provider:
        marker = "✅" if store.has_credential(user_id, provider) else "❌"
        console.print(f"{marker} {provider.value}")


@tokens_app.command("refresh")
def refresh_token(
    user_id: str = typer.Argument(..., help="User ID"),
    provider: Provider = typer.Option(..., "--provider", "-p", help="Provider to refresh"),
) -> None:
    """Refresh a stored credential now."""
    try:
        asyncio.run(_refresher().refresh_credential(user_id, provider))
    except AccountsError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[green]✅ Refreshed {provider.value} credential for {user_id}[/green]")


@tokens_app.command("restream-url")
def restream_url(
    user_id: str = typer.Argument(..., help="User ID"),
) -> None:
    """Print the Restream chat websocket URL for a user."""
    url = asyncio.run(_refresher().restream_websocket_url(user_id))
    if url is None:
        console.print("[yellow]No live Restream token for this user[/yellow]")
        raise typer.Exit(code=1)
    console.print(url)
