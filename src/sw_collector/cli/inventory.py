"""List command: dump the software inventory."""

import json
from typing import Optional

import typer

from .. import api
from ..storage import format_item
from . import app
from ._common import collector_errors, console, err_console, resolve_config


@app.command("list")
def list_inventory(
    ctx: typer.Context,
    installed: bool = typer.Option(
        False,
        "--installed",
        help="Only installed software identities",
    ),
    removed: bool = typer.Option(
        False,
        "--removed",
        help="Only removed software identities",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List the inventory as [bold]name,package,version,installed[/bold] lines.
    """
    if installed and removed:
        console.print("[red]Error:[/red] --installed and --removed are mutually exclusive")
        raise typer.Exit(2)

    selection: Optional[bool] = True if installed else (False if removed else None)
    config = resolve_config(ctx)

    with collector_errors("listing"):
        listing = api.list_inventory(config, installed=selection)

    if json_output:
        typer.echo(json.dumps(listing.to_dict(), indent=2))
        return

    for item in listing.items:
        typer.echo(format_item(item))

    if not config.quiet:
        err_console.print(
            f"{listing.count} software identities "
            f"({listing.installed_count} installed, {listing.removed_count} removed)"
        )
