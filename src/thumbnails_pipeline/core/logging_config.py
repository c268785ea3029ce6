"""Centralized logging configuration for the thumbnails pipeline."""

import os
import sys
import logging
from typing import Optional

DEFAULT_LOGGER_NAME = "thumbnails-pipeline"

STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level: Optional[str] = None) -> int:
    """Map a level name, or ``LOG_LEVEL`` when omitted, to a logging level."""
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Setup centralized logging with environment variable configuration.

    Args:
        name: Logger name (defaults to "thumbnails-pipeline")
        level: Log level override (defaults to env var or INFO)
        format_type: Logging format ("structured" or "simple")

    Returns:
        Configured logger instance

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Set format type ("structured" or "simple")
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))

    # Avoid duplicate handlers on warm re-invocation
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        env_format = os.getenv("LOG_FORMAT", format_type).lower()

        if env_format == "structured":
            formatter = logging.Formatter(STRUCTURED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        else:
            formatter = logging.Formatter(SIMPLE_FORMAT)

        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance with consistent configuration.

    Child names are namespaced under the package logger, so
    ``get_logger("handler")`` returns ``thumbnails-pipeline.handler``.
    """
    if name != DEFAULT_LOGGER_NAME and not name.startswith(DEFAULT_LOGGER_NAME + "."):
        name = f"{DEFAULT_LOGGER_NAME}.{name}"
    return setup_logger(name)


def set_debug(enabled: bool = True) -> None:
    """Switch the package loggers to DEBUG (or back to the configured level)."""
    level = logging.DEBUG if enabled else resolve_level()
    root = logging.getLogger(DEFAULT_LOGGER_NAME)
    root.setLevel(level)
    for name, candidate in logging.Logger.manager.loggerDict.items():
        if name.startswith(DEFAULT_LOGGER_NAME + ".") and isinstance(candidate, logging.Logger):
            candidate.setLevel(level)
