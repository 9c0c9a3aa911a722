"""Logging setup for the scan entrypoints."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red",
        "critical": "red bold",
        "debug": "dim",
    }
)


def setup_logging(verbose: bool = False, level: int = logging.INFO) -> None:
    """Route package logs to stderr through rich.

    Args:
        verbose: Enable debug output
        level: Logging level when not verbose
    """
    if verbose:
        level = logging.DEBUG

    handler = RichHandler(
        console=Console(stderr=True, theme=_THEME),
        show_time=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter(fmt="%(name)s: %(message)s", datefmt="[%X]"))

    logger = logging.getLogger("npm_ioc_scanner")
    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    logging.getLogger("urllib3").setLevel(logging.WARNING)
