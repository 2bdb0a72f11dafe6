"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "xambuild"


def configure_logging(level: str = "INFO", console: Console | None = None) -> logging.Logger:
    """Route the ``xambuild`` logger through a Rich handler on stderr."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    # Replace handlers if called twice (e.g. from tests).
    logger.handlers.clear()
    logger.addHandler(handler)
    return logger
