"""
Custom exceptions for LeaseKeeper.

Provides a hierarchy of exceptions for lease document lifecycle errors.
Every error carries a human readable message plus a details mapping that
callers can use for presentation or logging.
"""

from typing import Any, Dict, Optional


class LeaseError(Exception):
    """Base exception for all LeaseKeeper errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(LeaseError):
    """Raised when there are configuration issues."""
    pass


class ValidationError(LeaseError):
    """Invalid document names or lease data."""
    pass


class TemplateNotFound(LeaseError):
    """Master template missing from the templates tier."""

    def __init__(self, name: str, **kwargs):
        super().__init__(f"Template '{name}' not found", **kwargs)
        self.name = name


class WorkingTemplateNotFound(LeaseError):
    """Working draft missing from the working tier."""

    def __init__(self, name: str, **kwargs):
        super().__init__(f"Working template '{name}' not found", **kwargs)
        self.name = name


class FileCreationFailed(LeaseError):
    """A completed lease file could not be created."""

    def __init__(self, reason: str, **kwargs):
        super().__init__(f"Failed to create file: {reason}", **kwargs)
        self.reason = reason


class FileAccessError(LeaseError):
    """Read or write failure on an existing lease document."""

    def __init__(self, reason: str, **kwargs):
        super().__init__(f"File access error: {reason}", **kwargs)
        self.reason = reason


class InvalidTemplate(LeaseError):
    """Template text cannot be composed into a lease."""

    def __init__(self, reason: str, **kwargs):
        super().__init__(f"Invalid template: {reason}", **kwargs)
        self.reason = reason


class DirectoryCreationFailed(LeaseError):
    """A lease directory could not be created."""

    def __init__(self, path: str, reason: str, **kwargs):
        super().__init__(f"Failed to create directory {path}: {reason}", **kwargs)
        self.path = path
        self.reason = reason
