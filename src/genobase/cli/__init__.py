"""Command-line interface for the genobase build pipeline."""

from .main import main

__all__ = ["main"]
