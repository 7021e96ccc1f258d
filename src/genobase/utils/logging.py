"""
Logging utilities for the genobase build pipeline.

This module provides centralized logging configuration using loguru.
"""

import sys
import time
import functools
from pathlib import Path
from typing import Optional, Dict, Any
from loguru import logger


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    enable_json: bool = False,
    rotation: str = "1 week",
    retention: str = "1 month",
) -> None:
    """
    Setup centralized logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        format_string: Custom format string
        enable_json: Enable JSON structured logging
        rotation: Log rotation interval
        retention: Log retention period
    """
    logger.remove()

    if format_string is None:
        if enable_json:
            format_string = "{message}"
        else:
            format_string = (
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{name}:{function}:{line} | "
                "{message}"
            )

    logger.add(
        sys.stderr,
        format=format_string,
        level=level,
        colorize=True,
        serialize=enable_json,
    )

    if log_file:
        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation=rotation,
            retention=retention,
            serialize=enable_json,
        )

    logger.debug("Logging system initialized")


def log_error_with_context(
    error: Exception,
    context: Dict[str, Any],
    operation: Optional[str] = None,
) -> None:
    """
    Log error with additional context.

    Args:
        error: Exception that occurred
        context: Additional context information
        operation: Optional name of the failing operation
    """
    logger.bind(
        error_type=type(error).__name__,
        context=context,
        operation=operation,
    ).opt(exception=error).error(f"Error in {operation or 'operation'}: {error}")


class LoggerMixin:
    """Mixin class to add logging capabilities to any class."""

    @property
    def logger(self):
        """Get logger instance with class name."""
        return logger.bind(class_name=self.__class__.__name__)


def performance_monitor(func):
    """
    Decorator to log the execution time of a function.

    Exceptions are re-raised after the timing is logged.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            return func(*args, **kwargs)
        finally:
            logger.debug(f"Performance: {func.__name__} executed in {time.time() - start_time:.3f}s")

    return wrapper
