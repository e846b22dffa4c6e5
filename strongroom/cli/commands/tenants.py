"""
strongroom tenants command - Tenant listing.
"""

import asyncio

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ...client import Strongroom
from ...errors import StrongroomError

console = Console()


def tenants_list_command(
    token: str = typer.Option(
        ...,
        "--token",
        "-t",
        envvar="STRONGROOM_TOKEN",
        help="Access token of the caller",
    ),
    limit: int = typer.Option(50, "--limit", "-l", help="Maximum tenants to return"),
    offset: int = typer.Option(0, "--offset", "-o", help="Number of tenants to skip"),
) -> None:
    """
    List the tenants visible to the caller.

    Example:
        $ strongroom tenants list --token "$TOKEN"
        $ STRONGROOM_TOKEN=... strongroom tenants list --limit 10
    """
    console.print("\n[bold cyan]Tenants[/bold cyan]\n")

    asyncio.run(_list_tenants(token, limit, offset))


async def _list_tenants(token: str, limit: int, offset: int) -> None:
    try:
        async with await Strongroom.create() as sr:
            identity = await sr.identities.resolve(token)
            tenants = await sr.tenants.list(identity, limit=limit, offset=offset)
    except (StrongroomError, ValidationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not tenants:
        console.print("[yellow]No tenants found[/yellow]\n")
        return

    table = Table(title=f"Tenants (showing {len(tenants)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Status", style="green")
    table.add_column("System", style="blue")

    for tenant in tenants:
        table.add_row(
            str(tenant.id),
            tenant.name,
            tenant.status.value,
            "✓" if tenant.is_system_admin_tenant else "—",
        )

    console.print(table)
    console.print()
