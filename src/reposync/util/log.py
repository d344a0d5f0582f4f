"""Logging setup for reposync.

Operator-facing output goes through the standard logging module; the CLI
configures the package logger once, library modules only call getLogger.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from typing import Optional

LOGGER_NAME: str = "reposync"

_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logger(
    name: str = LOGGER_NAME,
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Set up a logger with a console handler and an optional rotating file handler.

    Args:
        name: Logger name (the package logger by default)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path of a log file; no file logging when None
        log_format: Custom log format string
        date_format: Custom date format string (ISO 8601 by default)
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup log files to keep

    Returns:
        Configured logger instance

    Raises:
        ValueError: if level is not a known logging level
    """
    level_upper = level.upper()
    if level_upper not in _LEVELS:
        raise ValueError(
            f"Invalid log level: {level}. Must be one of: {', '.join(_LEVELS)}"
        )

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level_upper))

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    if log_format is None:
        log_format = "%(asctime)s [%(levelname)s] %(message)s"
    if date_format is None:
        date_format = "%Y-%m-%dT%H:%M:%S"

    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # boto's own debug chatter is not useful to operators
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)

    return logger
