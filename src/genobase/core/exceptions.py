"""
Custom exceptions for the genobase build pipeline.

This module defines the exception hierarchy used throughout the application.
Configuration errors abort a single build target; parse and auxiliary tool
failures are reported by the dispatcher without propagating.
"""

from typing import Optional, Any, Dict, Iterable


class GenobaseError(Exception):
    """Base exception class for all genobase errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize GenobaseError.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        result = self.message
        if self.error_code:
            result = f"[{self.error_code}] {result}"
        if self.details:
            result += f" (Details: {self.details})"
        return result


class ConfigurationError(GenobaseError):
    """Raised when build parameters or settings are invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        target: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize ConfigurationError.

        Args:
            message: Error message
            config_key: Option or setting that caused the error
            config_value: Invalid value
            target: Build target being validated, if any
            **kwargs: Additional arguments passed to parent
        """
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)
        if target:
            details["target"] = target

        super().__init__(message, details=details, **kwargs)
        self.config_key = config_key
        self.config_value = config_value
        self.target = target


class MandatoryOptionError(ConfigurationError):
    """Raised when a build target is invoked without a required option."""

    def __init__(self, option: str, target: str):
        super().__init__(
            f"'{option}' option is mandatory for '{target}' builder",
            config_key=option,
            target=target,
            error_code="MANDATORY_OPTION",
        )
        self.option = option


class InvalidAssemblyError(ConfigurationError):
    """Raised when an assembly is not one of the accepted values for a target."""

    def __init__(self, assembly: str, accepted: Iterable[str], target: str):
        self.accepted = tuple(accepted)
        super().__init__(
            f"Assembly '{assembly}' is not valid. Possible values: {', '.join(self.accepted)}",
            config_key="assembly",
            config_value=assembly,
            target=target,
            error_code="INVALID_ASSEMBLY",
        )


class TargetNotImplementedError(ConfigurationError):
    """Raised for build targets that are declared but have no builder."""

    def __init__(self, target: str):
        super().__init__(
            f"'{target}' builder is not implemented yet",
            target=target,
            error_code="NOT_IMPLEMENTED",
        )


class ExternalToolError(GenobaseError):
    """Raised when an external helper program cannot be launched."""

    def __init__(
        self,
        message: str,
        script: Optional[str] = None,
        working_directory: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize ExternalToolError.

        Args:
            message: Error message
            script: Script or executable that failed to launch
            working_directory: Directory the launch was attempted in
            **kwargs: Additional arguments passed to parent
        """
        details = kwargs.pop("details", {})
        if script:
            details["script"] = script
        if working_directory:
            details["working_directory"] = working_directory

        super().__init__(message, details=details, **kwargs)
        self.script = script
        self.working_directory = working_directory


class ParseError(GenobaseError):
    """Raised by parsers when an input source cannot be transformed."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        line_number: Optional[int] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if source:
            details["source"] = source
        if line_number is not None:
            details["line_number"] = line_number

        super().__init__(message, details=details, **kwargs)
        self.source = source
        self.line_number = line_number


class AdaptorNotInitializedError(GenobaseError):
    """Raised when an adaptor is requested for a key that was never opened."""

    def __init__(
        self,
        message: str,
        species: Optional[str] = None,
        assembly: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if species:
            details["species"] = species
        if assembly:
            details["assembly"] = assembly

        super().__init__(message, details=details, **kwargs)
        self.species = species
        self.assembly = assembly
