"""
strongroom setup command - Seed the system admin tenant.
"""

import asyncio

import typer
from pydantic import ValidationError
from rich.console import Console

from ...client import Strongroom
from ...errors import StrongroomError

console = Console()


def setup_command(
    tenant: str = typer.Argument(..., help="Name of the system admin tenant"),
    username: str = typer.Argument(..., help="Username of the first system admin"),
    password_hash: str = typer.Option(
        ...,
        "--password-hash",
        help="Password hash for the admin, produced by your password hasher",
    ),
) -> None:
    """
    Create the system admin tenant and its first SystemAdmin user.

    Only works once: it refuses to run when a system admin tenant exists.

    Example:
        $ strongroom setup Operators root --password-hash '$argon2id$v=19$...'
    """
    console.print("\n[bold cyan]Strongroom Setup[/bold cyan]\n")

    asyncio.run(_setup(tenant, username, password_hash))


async def _setup(tenant_name: str, username: str, password_hash: str) -> None:
    try:
        async with await Strongroom.create() as sr:
            tenant, user = await sr.tenants.seed_system_tenant(
                name=tenant_name,
                username=username,
                password_hash=password_hash,
            )
    except (StrongroomError, ValidationError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print("[green]✓[/green] System admin tenant created")
    console.print(f"\nTenant ID: [cyan]{tenant.id}[/cyan]")
    console.print(f"Tenant: [cyan]{tenant.name}[/cyan]")
    console.print(f"User ID: [cyan]{user.id}[/cyan]")
    console.print(f"Username: [cyan]{user.username}[/cyan]")
    console.print(f"Roles: [cyan]{', '.join(sorted(user.roles))}[/cyan]\n")
