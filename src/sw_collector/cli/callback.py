"""Global options and the default command."""

from pathlib import Path
from typing import Optional

import typer

from . import app
from ._common import console


@app.callback(invoke_without_command=True, no_args_is_help=False)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    debug: Optional[int] = typer.Option(
        None,
        "-d",
        "--debug",
        help="Debug level: 0 warnings, 1 info, 2-4 debug",
        min=0,
        max=4,
    ),
    quiet: bool = typer.Option(
        False,
        "-q",
        "--quiet",
        help="Only report errors on the console",
    ),
    count: Optional[int] = typer.Option(
        None,
        "--count",
        help="Process at most N new transactions (0 = all)",
        min=0,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Collect the installed software inventory from the package manager's
    transaction log.

    Without a command, runs [bold]extract[/bold].

    [bold cyan]Examples:[/bold cyan]

      sw-collector init

      sw-collector --count 10

      sw-collector list --installed

      sw-collector -c collector.toml report
    """
    if version:
        from .. import __version__

        console.print(f"[bold cyan]sw-collector[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    if debug is not None:
        ctx.obj["debug_level"] = debug
    if quiet:
        ctx.obj["quiet"] = True
    if count is not None:
        ctx.obj["count"] = count

    if ctx.invoked_subcommand is not None:
        return

    from .extract import run_extract

    run_extract(ctx)
