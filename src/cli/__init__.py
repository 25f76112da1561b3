"""Main CLI application module."""

import typer

from .db_commands import db_app
from .user_commands import users_app

# Create the main CLI application
app = typer.Typer(
    help="🛠️  Storefront API management CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")


@app.command("init-db")
def init_db_command() -> None:
    """Create every database table (shortcut for ``db init``)."""
    from .db_commands import init

    init()


@app.command("seed")
def seed_command() -> None:
    """Insert sample users, categories and products (shortcut for ``db seed``)."""
    from .db_commands import seed

    seed()


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
