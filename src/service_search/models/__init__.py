"""Data models for service search."""

from .record import ApplicantType, ServiceRecord, ServiceRecordModel
from .intent import AnalyzedIntent, ClassificationResult, DegradedReason, IntentResponseModel
from .context import QueryContext
from .result import ScoredRecord, SearchResponse

__all__ = [
    "ApplicantType",
    "ServiceRecord",
    "ServiceRecordModel",
    "AnalyzedIntent",
    "ClassificationResult",
    "DegradedReason",
    "IntentResponseModel",
    "QueryContext",
    "ScoredRecord",
    "SearchResponse",
]
