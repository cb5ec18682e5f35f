"""
Logging setup.

All modules log through get_logger(); configure_logging() attaches a single
rich handler to the package logger so engine messages render alongside CLI output.
"""

import logging

from rich.logging import RichHandler

from pharmachain.config import settings

ROOT_LOGGER = "pharmachain"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Install the rich handler on the package logger.

    Safe to call more than once; only the level is updated on repeat calls.

    Args:
        level: Log level name, defaults to settings.log_level

    Returns:
        The package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level or settings.log_level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
