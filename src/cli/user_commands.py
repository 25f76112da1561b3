"""User management CLI commands."""

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from src.storefront.core.errors import ServiceError
from src.storefront.core.models.auth import RegisterRequest
from src.storefront.core.services import AuthService, DbSessionService

console = Console()

users_app = typer.Typer(help="Manage API user accounts")


@users_app.command("create-admin")
def create_admin(
    email: str = typer.Option(..., "--email", "-e", help="Email address"),
    password: str | None = typer.Option(
        None, "--password", "-p", help="Password (prompted when omitted)"
    ),
    first_name: str = typer.Option("Admin", "--first-name", "-f", help="First name"),
    last_name: str = typer.Option("User", "--last-name", "-l", help="Last name"),
) -> None:
    """Create an admin account without going through the API."""
    if password is None:
        password = Prompt.ask("Password", password=True)

    try:
        data = RegisterRequest(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
        )
    except ValidationError as e:
        for error in e.errors():
            console.print(f"[red]❌ {error['loc'][0]}: {error['msg']}[/red]")
        raise typer.Exit(code=1) from e

    try:
        with DbSessionService().session_scope() as session:
            user = AuthService(session).create_admin(data)
    except ServiceError as e:
        console.print(f"[red]❌ {e.detail}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Created admin '{user.email}' ({user.id})[/green]")


@users_app.command("list")
def list_users(
    page: int = typer.Option(1, "--page", help="Page number"),
    limit: int = typer.Option(20, "--limit", "-l", help="Users per page"),
) -> None:
    """List registered accounts, newest first."""
    with DbSessionService().session_scope() as session:
        result = AuthService(session).list_users(page, limit)

    if not result.data:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title=f"Users (page {result.page}/{max(result.total_pages, 1)})")
    table.add_column("ID", style="cyan")
    table.add_column("Email", style="blue")
    table.add_column("Name", style="magenta")
    table.add_column("Role", style="green")
    table.add_column("Active", style="yellow")

    for user in result.data:
        table.add_row(
            user.id,
            user.email,
            user.full_name,
            user.role.value,
            "✅" if user.is_active else "❌",
        )

    console.print(table)
    console.print(f"\n[green]{result.total} users in total[/green]")
