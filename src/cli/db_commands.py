"""Database management CLI commands."""

import typer
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from src.storefront.core.services import DbManageService, DbSessionService
from src.storefront.runtime.init_db import init_db
from src.storefront.runtime.seed import seed_database

console = Console()

db_app = typer.Typer(help="Create, seed and reset the application database")


@db_app.command("init")
def init() -> None:
    """Create all database tables that do not exist yet."""
    try:
        init_db()
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print("[green]✅ Database tables created[/green]")


@db_app.command("seed")
def seed() -> None:
    """Insert the sample accounts, categories and products that are missing."""
    db_service = DbSessionService()
    try:
        DbManageService(db_service.engine).create_all()
        with db_service.session_scope() as session:
            created = seed_database(session)
    except Exception as e:
        console.print(f"[red]❌ Seeding failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(title="Seed results")
    table.add_column("Kind", style="cyan")
    table.add_column("Created", style="green")
    for kind, names in created.items():
        table.add_row(kind, ", ".join(names) if names else "[dim]nothing new[/dim]")
    console.print(table)


@db_app.command("reset")
def reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Drop and recreate every table. All data is lost."""
    if not force and not Confirm.ask("Drop all tables and recreate them?"):
        console.print("[yellow]Reset cancelled[/yellow]")
        return

    manage = DbManageService(DbSessionService().engine)
    manage.drop_all()
    manage.create_all()
    console.print("[green]✅ Database reset[/green]")
