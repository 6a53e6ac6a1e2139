"""Service facade for search turns."""

from .service import ServiceSearchService

__all__ = ["ServiceSearchService"]
