"""User and stream key CLI commands."""

import typer
from rich.table import Table

from src.accounts.core.errors import AccountsError
from src.accounts.core.services.user import EntityResolver, StreamKeyService, is_admin
from src.accounts.entities.core.user import UserRepository
from src.accounts.runtime.context import get_config

from .utils import console, get_db

users_app = typer.Typer(help="Inspect users and manage their stream keys")


@users_app.command("list")
def list_users(
    limit: int = typer.Option(100, "--limit", "-l", help="Maximum number of users to show"),
) -> None:
    """List users."""
    admin_emails = get_config().accounts.admin_emails
    with get_db().session_scope() as session:
        users = UserRepository(session).list_all(limit=limit)

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("ID", style="cyan")
    table.add_column("Handle", style="green")
    table.add_column("Email", style="blue")
    table.add_column("Name", style="magenta")
    table.add_column("Admin", style="yellow")

    for user in users:
        table.add_row(
            user.id,
            user.handle or "",
            user.email or "",
            user.name or "",
            "✅" if is_admin(user, admin_emails) else "",
        )

    console.print(table)
    console.print(f"\n[green]Found {len(users)} users[/green]")


@users_app.command("show")
def show_user(
    user_id: str = typer.Argument(..., help="User ID"),
) -> None:
    """Show a user and the providers linked to it."""
    with get_db().session_scope() as session:
        user = UserRepository(session).get_with_identities(user_id)

    if user is None:
        console.print(f"[red]❌ User '{user_id}' not found[/red]")
        raise typer.Exit(code=1)

    console.print(f"[bold]{user.name or user.handle or user.id}[/bold] <{user.email or '-'}>")
    console.print(f"Stream key: {'set' if user.stream_key else 'not set'}")

    table = Table(title="Linked providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Account", style="green")
    table.add_column("Refresh token", style="yellow")
    for identity in user.identities:
        table.add_row(
            identity.provider.value,
            identity.provider_login or identity.provider_email or identity.provider_id or "",
            "✅" if identity.provider_refresh_token else "❌",
        )
    console.print(table)


@users_app.command("stream-key")
def regenerate_stream_key(
    user_id: str = typer.Argument(..., help="User ID"),
) -> None:
    """Issue a new stream key, invalidating the previous one."""
    service = StreamKeyService(get_db(), key_bytes=get_config().accounts.stream_key_bytes)
    try:
        user = service.generate_stream_key(user_id)
    except AccountsError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[green]✅ New stream key:[/green] {user.stream_key}")


@users_app.command("entity")
def ensure_entity(
    user_id: str = typer.Argument(..., help="User ID"),
) -> None:
    """Create (or show) the internal platform entity for a user."""
    with get_db().session_scope() as session:
        user = UserRepository(session).get(user_id)
    if user is None:
        console.print(f"[red]❌ User '{user_id}' not found[/red]")
        raise typer.Exit(code=1)

    resolver = EntityResolver(get_db(), internal_platform=get_config().accounts.internal_platform)
    try:
        entity = resolver.get_or_create_for_user(user)
    except AccountsError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[green]✅ Entity {entity.id}[/green] handle=[cyan]{entity.handle}[/cyan]")
