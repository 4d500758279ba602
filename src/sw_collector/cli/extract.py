"""Extract command: synchronize the inventory with the transaction log."""

from typing import Optional

import typer

from .. import api
from . import app
from ._common import collector_errors, console, resolve_config


def run_extract(ctx: typer.Context, count: Optional[int] = None) -> None:
    config = resolve_config(ctx, count=count)

    with collector_errors("extraction"):
        result = api.extract(config)

    if config.quiet:
        return

    console.print(
        f"Processed [bold]{result.transactions}[/bold] transactions, "
        f"[bold]{result.package_events}[/bold] package events "
        f"(last eid [cyan]{result.cursor.eid}[/cyan], {result.cursor.timestamp})"
    )
    if result.count_limited:
        console.print("[yellow]Stopped at transaction limit; run again to continue[/yellow]")


@app.command()
def extract(
    ctx: typer.Context,
    count: Optional[int] = typer.Option(
        None,
        "--count",
        help="Process at most N new transactions (0 = all)",
        min=0,
    ),
):
    """Add new package-manager transactions to the inventory."""
    run_extract(ctx, count=count)
