"""Database management CLI commands."""

import typer

from src.accounts.core.services.database.db_manage import DbManageService

from .utils import console, get_db

db_app = typer.Typer(help="Manage the accounts database")


@db_app.command("init")
def init_db() -> None:
    """Create all tables."""
    DbManageService(get_db().engine).create_all()
    console.print("[green]✅ Database tables created[/green]")


@db_app.command("check")
def check_db() -> None:
    """Check database connectivity."""
    if not get_db().health_check():
        console.print("[red]❌ Database is not reachable[/red]")
        raise typer.Exit(code=1)
    console.print("[green]✅ Database is reachable[/green]")
