"""
Logging Configuration Module

Provides consistent logging setup for the storage and retrieval engine.
Library modules log through ``logging.getLogger(__name__)``; the composing
process calls ``setup_logging`` once at startup.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

APP_LOGGER_NAME = "rag_store"

# Top-level packages whose module loggers are routed to the app handlers.
_PACKAGES = ("core", "chunking", "vector_store", "chat_archive", "retrieval")


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging for the storage and retrieval engine.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to log file
        format_string: Optional custom format string

    Returns:
        Configured application logger
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Module loggers (vector_store.store, ...) are not children of the app
    # logger, so they share its handlers explicitly.
    for package in _PACKAGES:
        package_logger = logging.getLogger(package)
        package_logger.setLevel(level)
        package_logger.handlers = list(logger.handlers)
        package_logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific component.

    Args:
        name: Component name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")
