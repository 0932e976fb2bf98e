"""
Centralized logging configuration using Loguru.
Follows Single Responsibility Principle - only handles logging setup.
"""

import sys
from pathlib import Path

from loguru import logger

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

_configured = False


def resolve_log_level(log_level, debug: bool) -> str:
    """
    Pick the console log level.

    LOG_LEVEL takes precedence over the DEBUG flag; unknown levels fall back to INFO.
    """
    if log_level:
        level = log_level.upper()
        return level if level in VALID_LEVELS else "INFO"
    return "DEBUG" if debug else "INFO"


def setup_logger(force: bool = False):
    """Configure logger handlers. Only configures once unless ``force`` is set."""
    global _configured

    if _configured and not force:
        return

    from .config import get_settings

    settings = get_settings()
    log_level = resolve_log_level(settings.log_level, settings.debug)

    logger.remove()

    logger.add(
        sys.stdout,
        colorize=True,
        format=CONSOLE_FORMAT,
        level=log_level,
    )

    if settings.log_to_file:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        # File logs always DEBUG to capture everything
        logger.add(
            log_dir / "app.log",
            rotation="100 MB",
            retention="30 days",
            compression="zip",
            format=FILE_FORMAT,
            level="DEBUG",
        )

        logger.add(
            log_dir / "error.log",
            rotation="100 MB",
            retention="30 days",
            compression="zip",
            format=FILE_FORMAT,
            level="ERROR",
        )

    _configured = True


# Configure logger on module import
setup_logger()

__all__ = ["logger", "setup_logger", "resolve_log_level"]
