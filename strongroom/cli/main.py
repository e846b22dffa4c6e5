"""
Strongroom CLI - Command-line interface for tenants, roles and setup.

Usage:
    strongroom setup        Seed the system admin tenant
    strongroom roles        Inspect the role catalog
    strongroom tenants      List tenants
"""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from .commands import roles, setup, tenants

# Create the main Typer app
app = typer.Typer(
    name="strongroom",
    help="Multi-tenant zero-knowledge vaults with Supabase storage",
    add_completion=False,
)

# Create a Rich console for pretty output
console = Console()

# Register top-level commands
app.command(name="setup")(setup.setup_command)

# Create roles subcommand group
roles_app = typer.Typer(help="Inspect the role catalog")
roles_app.command(name="list")(roles.roles_list_command)
roles_app.command(name="check")(roles.roles_check_command)
app.add_typer(roles_app, name="roles")

# Create tenants subcommand group
tenants_app = typer.Typer(help="Manage tenants")
tenants_app.command(name="list")(tenants.tenants_list_command)
app.add_typer(tenants_app, name="tenants")


def configure_logging(debug: bool = False) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def callback(
    debug: bool = typer.Option(
        False,
        "--debug",
        envvar="STRONGROOM_DEBUG",
        help="Log debug output",
    ),
) -> None:
    """
    Strongroom - Multi-tenant zero-knowledge vaults.

    The server stores what your clients encrypt and never sees the keys.
    """
    configure_logging(debug)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
