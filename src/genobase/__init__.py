"""
genobase
========

Build pipeline normalizing genomic reference datasets into gzip-compressed
JSON-lines files for a genomic knowledge store, and an adaptor registry
giving storage-agnostic read access to the built data.

Modules:
    build: Build target validation and dispatch
    parsers: Format-specific parsers
    serializers: Record writers
    adaptors: Adaptor registry and entity read contracts
    config: Configuration management
    cli: Command-line interface
    utils: Logging and external tool helpers

Example:
    >>> from genobase import BuildDispatcher
    >>> report = BuildDispatcher().execute("clinvar", "variant_summary.txt", "out", "hsapiens")
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("genobase-builder")
except PackageNotFoundError:
    __version__ = "unknown"

__license__ = "MIT"

from .build.dispatcher import BuildDispatcher
from .adaptors import AdaptorFactory, JsonStoreAdaptorFactory
from .core.exceptions import (
    GenobaseError,
    ConfigurationError,
    ExternalToolError,
    AdaptorNotInitializedError,
)
from .config.settings import get_settings

__all__ = [
    "__version__",
    "BuildDispatcher",
    "AdaptorFactory",
    "JsonStoreAdaptorFactory",
    "GenobaseError",
    "ConfigurationError",
    "ExternalToolError",
    "AdaptorNotInitializedError",
    "get_settings",
]
