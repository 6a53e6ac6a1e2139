"""Core scoring and ranking components for service search.

Submodules are imported directly (``service_search.core.engine`` etc.) so
that the utilities can depend on the exceptions defined here.
"""

from .exceptions import (
    ServiceSearchError,
    ValidationError,
    CatalogError,
    ClassificationError,
    SearchError,
    ConfigurationError,
)

__all__ = [
    "ServiceSearchError",
    "ValidationError",
    "CatalogError",
    "ClassificationError",
    "SearchError",
    "ConfigurationError",
]
