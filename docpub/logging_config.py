"""
Centralized logging configuration.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
``setup_logging`` once to attach a rich console handler to the package logger.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "docpub"
LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        verbose: Log at DEBUG instead of INFO.
        console: Console to write to (default: stderr).

    Returns:
        The configured ``docpub`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Avoid adding handlers multiple times
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def redact(text: str, secrets: list[str | None]) -> str:
    """Replace every non-empty secret in ``text`` with ``***``."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    return text
