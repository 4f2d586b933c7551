"""
Application logging configuration.

This module provides unified logging configuration for the scoped access
token service. Module loggers are created as children of the ``scoped_auth``
logger (e.g. ``scoped_auth.access``) so they share the handler installed here.
"""
import logging
import sys

from scoped_auth.config import settings

LOGGER_NAME = "scoped_auth"


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configure and return the application logger.

    The logger outputs to stdout with a structured format including:
    - Timestamp
    - Logger name
    - Log level
    - Message

    Args:
        level: Log level name; defaults to the LOG_LEVEL setting

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level or settings.LOG_LEVEL)

    # Prevent duplicate handlers if called multiple times
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the application logger, e.g. get_logger("access")."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
