"""Custom exceptions for the service search system."""

from typing import Optional

from ..models.intent import DegradedReason


class ServiceSearchError(Exception):
    """Base exception for service search operations."""
    pass


class ValidationError(ServiceSearchError):
    """Exception raised during input validation."""
    pass


class CatalogError(ServiceSearchError):
    """Exception raised while loading or importing the catalog."""
    pass


class ClassificationError(ServiceSearchError):
    """Exception raised when the intent service call or its response fails.

    Never escapes the intent adapter; it is mapped to a degraded result.
    """

    def __init__(self, message: str, reason: Optional[DegradedReason] = None):
        super().__init__(message)
        self.reason = reason


class SearchError(ServiceSearchError):
    """Exception raised during search operations."""
    pass


class ConfigurationError(ServiceSearchError):
    """Exception raised for configuration issues."""
    pass
