"""Loguru logging setup."""

import os
import sys

from loguru import logger

from news_admin.config import Settings

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}\n{exception}"


def setup_logging(settings: Settings) -> None:
    """Configure loguru sinks for the application."""
    # Remove default handler
    logger.remove()

    log_level = settings.log_level.upper()

    # Console handler with colorization
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=log_level,
        colorize=True,
    )

    if settings.log_file:
        os.makedirs(os.path.dirname(settings.log_file) or ".", exist_ok=True)
        logger.add(
            settings.log_file,
            format=FILE_FORMAT,
            level=log_level,
            rotation=settings.log_rotation,
            retention=f"{settings.log_retention_days} days",
            compression="zip",
        )

    # Separate error log file (ERROR and above)
    if settings.log_error_file:
        os.makedirs(os.path.dirname(settings.log_error_file) or ".", exist_ok=True)
        logger.add(
            settings.log_error_file,
            format=FILE_FORMAT,
            level="ERROR",
            rotation=settings.log_rotation,
            retention=f"{settings.log_retention_days} days",
            compression="zip",
        )

    logger.info(f"Logging configured: level={log_level}, log_file={settings.log_file}")
