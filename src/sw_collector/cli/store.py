"""Init command: create the inventory store."""

import typer

from .. import api
from . import app
from ._common import collector_errors, console, resolve_config


@app.command()
def init(ctx: typer.Context):
    """Create the inventory store and its first transaction."""
    config = resolve_config(ctx)

    with collector_errors("initialization"):
        cursor, created = api.initialize(config)

    if created:
        console.print(
            f"[green]Initialized[/green] {config.database} "
            f"(epoch {cursor.epoch}, first time {cursor.timestamp})"
        )
    else:
        console.print(
            f"Store already initialized: last eid {cursor.eid}, "
            f"epoch {cursor.epoch}, {cursor.timestamp}"
        )
