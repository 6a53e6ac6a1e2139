"""
Government Service Search

Relevance scoring and ranking of government service items for colloquial
citizen queries, with optional semantic expansion from an LLM intent service.
"""

from .api.service import ServiceSearchService
from .config import IntentServiceConfig
from .core.adjuster import AdjustmentWeights
from .core.catalog import CatalogSnapshot, CatalogStore, records_from_rows
from .core.engine import ServiceSearchEngine, search
from .core.intent import IntentClassifier
from .models.context import QueryContext
from .models.intent import AnalyzedIntent, ClassificationResult, DegradedReason
from .models.record import ApplicantType, ServiceRecord
from .models.result import SearchResponse
from .utils.text_processing import normalize

__version__ = "1.0.0"

__all__ = [
    "ServiceSearchService",
    "ServiceSearchEngine",
    "search",
    "normalize",
    "IntentClassifier",
    "IntentServiceConfig",
    "AdjustmentWeights",
    "CatalogSnapshot",
    "CatalogStore",
    "records_from_rows",
    "QueryContext",
    "AnalyzedIntent",
    "ClassificationResult",
    "DegradedReason",
    "ApplicantType",
    "ServiceRecord",
    "SearchResponse",
]
