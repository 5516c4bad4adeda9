"""
Logger factory used across cougar_tutor.

Usage:
    from cougar_tutor.utils.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Something happened")
"""

import logging

from rich.logging import RichHandler

from cougar_tutor.config import LOG_LEVEL

_DEFAULT_LEVEL = logging.getLevelName(LOG_LEVEL)
if not isinstance(_DEFAULT_LEVEL, int):
    _DEFAULT_LEVEL = logging.INFO


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Create and return a named logger that writes through rich.

    Args:
        name: Typically ``__name__`` of the calling module.
        level: Explicit level override. Defaults to ``LOG_LEVEL`` from config.

    Returns:
        A configured ``logging.Logger`` instance.
    """
    resolved_level = level if level is not None else _DEFAULT_LEVEL
    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers if the logger already exists
    if not logger.handlers:
        logger.setLevel(resolved_level)

        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setLevel(resolved_level)
        handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))
        logger.addHandler(handler)

        logger.propagate = False

    return logger
