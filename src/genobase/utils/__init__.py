"""Utility functions for the genobase build pipeline."""

from .logging import setup_logging, LoggerMixin, log_error_with_context
from .process import ExternalToolRunner

__all__ = [
    "setup_logging",
    "LoggerMixin",
    "log_error_with_context",
    "ExternalToolRunner",
]
