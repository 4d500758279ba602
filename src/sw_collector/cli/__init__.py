"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="sw-collector",
    help="sw-collector - software inventory collector for remote attestation",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .callback import main as _main_callback  # noqa: F401, E402
from .extract import extract as _extract  # noqa: F401, E402
from .inventory import list_inventory as _list_inventory  # noqa: F401, E402
from .store import init as _init  # noqa: F401, E402
from .report import report as _report  # noqa: F401, E402


def main() -> None:
    app()
