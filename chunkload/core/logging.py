"""Logging utilities for chunkload modules."""

import logging

ROOT_LOGGER_NAME = 'chunkload'


def get_logger(name: str) -> logging.Logger:
    """Get a logger that inherits its handlers from the root logger.

    Loggers created here work with ``basicConfig()`` without an explicit
    ``setup_logging()`` call. When the root logger has no handlers yet the
    logger defaults to WARNING so library use stays quiet.

    Args:
        name: Logger name, ``chunkload.`` is prefixed when missing

    Returns:
        Configured logger instance
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + '.'):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)
    logger.propagate = True

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logger.setLevel(logging.WARNING)

    return logger
