"""
Logging configuration for sw-collector.

Console output goes through rich on stderr; a log file and syslog can be
added as extra sinks. The numeric debug level of the collector is mapped
onto standard logging levels here and nowhere else.
"""

import logging
import logging.handlers
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

SYSLOG_IDENT = "sw-collector"


def debug_level_to_logging(debug_level: int) -> int:
    """Map the collector debug level (0..4) to a logging level."""
    if debug_level <= 0:
        return logging.WARNING
    if debug_level == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    debug_level: int = 1,
    quiet: bool = False,
    log_file: Optional[str] = None,
    syslog: bool = False,
) -> logging.Logger:
    """
    Configure logging for a collector run.

    Args:
        debug_level: Collector debug level; 0 warnings only, 1 info, 2+ debug
        quiet: Only show errors on stderr (file and syslog sinks keep the level)
        log_file: Optional file path to append logs to
        syslog: Also send records to the local syslog daemon

    Returns:
        Configured logger instance for sw_collector
    """
    level = debug_level_to_logging(debug_level)
    verbose = level == logging.DEBUG

    console = Console(stderr=True)
    console_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    if quiet:
        console_handler.setLevel(logging.ERROR)

    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    if syslog:
        syslog_handler = logging.handlers.SysLogHandler(
            address="/dev/log", facility=logging.handlers.SysLogHandler.LOG_DAEMON
        )
        syslog_handler.ident = f"{SYSLOG_IDENT}: "
        syslog_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(syslog_handler)

    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )

    logger = logging.getLogger("sw_collector")
    logger.setLevel(level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., 'sw_collector.history.sync')
              If None, returns the root sw_collector logger

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger("sw_collector")

    if not name.startswith("sw_collector"):
        name = f"sw_collector.{name}"

    return logging.getLogger(name)
