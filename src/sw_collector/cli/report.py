"""Report command: send the inventory to the assessment service."""

import typer

from .. import api
from . import app
from ._common import collector_errors, console, resolve_config


@app.command()
def report(ctx: typer.Context):
    """Post the installed software identifiers to the REST service."""
    config = resolve_config(ctx)

    with collector_errors("reporting"):
        reported = api.report(config)

    console.print(f"[green]Reported[/green] {reported} installed software identities")
