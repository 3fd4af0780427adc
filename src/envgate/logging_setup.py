"""Logging setup for the envgate CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import LogLevel

_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def configure_logging(level: str = LogLevel.INFO.value, verbose: bool = False,
                      console: Console | None = None) -> logging.Logger:
    """Attach a rich handler to the ``envgate`` logger and return it."""
    logger = logging.getLogger("envgate")
    logger.setLevel(logging.DEBUG if verbose else _LEVELS.get(level, logging.INFO))

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
