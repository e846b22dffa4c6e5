"""
strongroom roles command - Inspect the role catalog.

The catalog is static, so these commands never touch the database.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ...errors import RoleCatalogError
from ...rbac import PermissionGuard, RoleCatalog, UserStatus

console = Console()

RolesFileOption = typer.Option(
    None,
    "--roles-file",
    "-r",
    envvar="STRONGROOM_ROLES_FILE",
    help="JSON role catalog (default: built-in roles)",
)


def _load_catalog(roles_file: Optional[Path]) -> RoleCatalog:
    try:
        if roles_file:
            return RoleCatalog.from_file(roles_file)
        return RoleCatalog.default()
    except RoleCatalogError as e:
        console.print(f"[red]Error loading role catalog:[/red] {e}")
        raise typer.Exit(1)


def roles_list_command(roles_file: Optional[Path] = RolesFileOption) -> None:
    """
    List roles and the permissions they grant.

    Example:
        $ strongroom roles list
        $ strongroom roles list --roles-file roles.json
    """
    catalog = _load_catalog(roles_file)

    table = Table(title=f"Roles ({len(catalog)})")
    table.add_column("Role", style="cyan")
    table.add_column("Permissions", style="green")

    for name in sorted(catalog.role_names()):
        table.add_row(name, ", ".join(sorted(catalog.permissions_for(name))))

    console.print(table)
    console.print()


def roles_check_command(
    roles: List[str] = typer.Argument(..., help="Role names held by the user"),
    permission: str = typer.Option(..., "--permission", "-p", help="Permission, e.g. entries.view"),
    inactive: bool = typer.Option(False, "--inactive", help="Check as an inactive user"),
    roles_file: Optional[Path] = RolesFileOption,
) -> None:
    """
    Check whether a role set grants a permission.

    Exits with status 1 when the permission is denied.

    Example:
        $ strongroom roles check Editor --permission entries.create
        $ strongroom roles check Viewer Editor -p entries.delete
    """
    catalog = _load_catalog(roles_file)
    guard = PermissionGuard(catalog)
    status = UserStatus.INACTIVE if inactive else UserStatus.ACTIVE

    try:
        verdict = guard.check(roles, status, permission)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    if verdict.allowed:
        console.print(f"[green]✓[/green] Allowed: [cyan]{verdict.permission}[/cyan]")
        return

    console.print(
        f"[red]✗[/red] Denied: [cyan]{verdict.permission}[/cyan] "
        f"([yellow]{verdict.reason.value}[/yellow])"
    )
    raise typer.Exit(1)
