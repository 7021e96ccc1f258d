"""Core functionality for the genobase build pipeline."""

from .exceptions import (
    GenobaseError,
    ConfigurationError,
    MandatoryOptionError,
    InvalidAssemblyError,
    TargetNotImplementedError,
    ExternalToolError,
    ParseError,
    AdaptorNotInitializedError,
)
from .types import (
    AdaptorKey,
    BuildOption,
    BuildOptions,
    BuildReport,
    BuildStatus,
    BuildTarget,
    EntityKind,
    InputKind,
    InputSpec,
    Species,
)

__all__ = [
    "GenobaseError",
    "ConfigurationError",
    "MandatoryOptionError",
    "InvalidAssemblyError",
    "TargetNotImplementedError",
    "ExternalToolError",
    "ParseError",
    "AdaptorNotInitializedError",
    "AdaptorKey",
    "BuildOption",
    "BuildOptions",
    "BuildReport",
    "BuildStatus",
    "BuildTarget",
    "EntityKind",
    "InputKind",
    "InputSpec",
    "Species",
]
