"""Scored records and search responses."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .context import QueryContext
from .intent import ClassificationResult
from .record import ServiceRecord


@dataclass(frozen=True)
class ScoredRecord:
    """
    A catalog record paired with its score for one search turn.

    Attributes:
        record: The scored record
        score: Final score, or None when the record was gated or filtered out
        position: Catalog position, used as the tie-breaker
    """
    record: ServiceRecord
    score: Optional[float]
    position: int

    def __post_init__(self) -> None:
        """Validate scored record."""
        if self.position < 0:
            raise ValueError("Position cannot be negative")

    @property
    def is_eligible(self) -> bool:
        return self.score is not None and self.score > 0


@dataclass
class SearchResponse:
    """
    Result of one search turn.

    Attributes:
        generation: Generation id of the turn that produced the response
        query: Raw query text
        normalized_query: Query after normalization
        results: Ranked records
        classification: Intent classification used for scoring
        context: Context captured for the turn (after intent adoption)
        catalog_version: Version of the catalog snapshot that was scored
    """
    generation: int
    query: str
    normalized_query: str
    results: List[ServiceRecord]
    classification: ClassificationResult
    context: QueryContext
    catalog_version: int = 0
    elapsed_seconds: float = field(default=0.0, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        intent = self.classification.intent
        degraded = self.classification.degraded_reason
        return {
            "generation": self.generation,
            "query": self.query,
            "normalized_query": self.normalized_query,
            "catalog_version": self.catalog_version,
            "intent": {
                "keywords": list(intent.keywords),
                "synonyms": list(intent.synonyms),
                "target_user": intent.applicant_type.value,
                "location": intent.location,
                "degraded_reason": degraded.value if degraded else None,
            },
            "results": [record.to_dict() for record in self.results],
            "elapsed_seconds": round(self.elapsed_seconds, 4),
        }
