"""Shared CLI helpers."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import CollectorConfig, load_config
from ..exceptions import CollectorError
from ..logging_config import get_logger, setup_logging

console = Console()
err_console = Console(stderr=True)

logger = get_logger(__name__)


def resolve_config(ctx: typer.Context, **overrides) -> CollectorConfig:
    """Build the run configuration from the global options plus ``overrides``.

    Logging is configured here, once the debug level and sinks are known.
    """
    options = dict(ctx.obj or {})
    config_file: Optional[Path] = options.pop("config", None)
    options.update({k: v for k, v in overrides.items() if v is not None})

    with collector_errors("configuration"):
        config = load_config(config_file=config_file, **options)

    setup_logging(
        debug_level=config.debug_level,
        quiet=config.quiet,
        log_file=config.log_file,
        syslog=config.syslog,
    )
    return config


@contextmanager
def collector_errors(action: str) -> Iterator[None]:
    """Turn collector failures into a red one-line error and an exit status."""
    try:
        yield

    except typer.Exit:
        raise

    except CollectorError as e:
        logger.debug("%s failed: %s: %s", action, e.__class__.__name__, e)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("%s interrupted by user", action)
        console.print(f"\n[yellow]{action.capitalize()} interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception("Unexpected error during %s", action)
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
