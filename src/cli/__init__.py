"""Main CLI application module."""

import typer

from src.accounts.runtime.logging import configure_logging

from .db_commands import db_app
from .token_commands import tokens_app
from .user_commands import users_app

app = typer.Typer(
    help="Accounts CLI - users, credentials and stream keys",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")
app.add_typer(tokens_app, name="tokens")


@app.callback()
def _setup() -> None:
    configure_logging()


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
