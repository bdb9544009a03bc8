"""Logging utilities for directupload modules."""

import logging
from typing import Optional

LOGGER_NAME = 'directupload'
DEFAULT_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def get_logger(name: str) -> logging.Logger:
    """Get a logger that automatically inherits from root logger.

    This ensures that loggers work with basicConfig() without needing
    explicit setup_logging() calls. The logger will:
    - Propagate to root logger (default behavior)
    - Only set a default level if root logger has no handlers

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    # Only set default level if root logger has no handlers
    # (i.e., basicConfig hasn't been called yet)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logger.setLevel(logging.WARNING)

    return logger


def configure_logging(
    level: int = logging.INFO,
    fmt: Optional[str] = None
) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Repeated calls only update the level, so the CLI can call this
    unconditionally.

    Args:
        level: Logging level for the package logger
        fmt: Optional format string

    Returns:
        The package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not any(getattr(h, '_directupload', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
        handler._directupload = True
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
