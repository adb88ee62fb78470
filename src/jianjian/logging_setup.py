"""Logging configuration for the command-line tool.

Library modules only create loggers (``logging.getLogger(__name__)``); they
never install handlers.  The CLI calls ``configure_logging`` once at start-up
to route records through Rich on stderr.
"""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "jianjian"


def configure_logging(level: str = "WARNING", console: Console | None = None) -> logging.Logger:
    """Attach a ``RichHandler`` to the package logger.

    Calling it again only updates the level; handlers are not duplicated.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger
