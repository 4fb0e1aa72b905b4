"""Centralized logging configuration for the backend

Sets up loguru sinks (console plus rotated files) and forwards records from
the standard `logging` module, which the provider services use, into loguru
so everything ends up in the same files.
"""
import logging
import sys
from pathlib import Path
from loguru import logger
from backend.config import settings


class InterceptHandler(logging.Handler):
    """Route stdlib logging records into loguru"""

    def emit(self, record: logging.LogRecord):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.bind(name=record.name).opt(exception=record.exc_info).log(level, record.getMessage())


def setup_logging(log_level: str = None):
    """Configure logging with rotation and formatting

    Args:
        log_level: Optional log level override (DEBUG, INFO, WARNING, ERROR)
                  If not provided, uses settings.log_level
    """
    level = log_level or settings.log_level

    logger.remove()
    # File formats use {extra[name]}; unbound records fall back to this
    logger.configure(extra={"name": "backend"})

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Console output (all levels based on LOG_LEVEL)
    logger.add(
        sys.stdout,
        format=settings.log_format,
        level=level,
        colorize=True
    )

    # API log file (INFO and above)
    logger.add(
        log_dir / "api.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function} - {message}",
        level="INFO",
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        compression="zip",
        enqueue=True
    )

    # Error log file (ERROR and above)
    logger.add(
        log_dir / "error.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}",
        level="ERROR",
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        compression="zip",
        enqueue=True,
        backtrace=True,
        diagnose=True
    )

    if level == "DEBUG":
        logger.add(
            log_dir / "debug.log",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} - {message}",
            level="DEBUG",
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="zip",
            enqueue=True
        )

    # Provider services log through the stdlib
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    logger.info("Logging system initialized")
    logger.info(f"Log directory: {log_dir.absolute()}")
    logger.info(f"Log level: {level}")


def get_logger(name: str):
    """Get a logger instance for a specific module

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance
    """
    return logger.bind(name=name)
