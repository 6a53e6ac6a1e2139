"""Search pipeline: normalize, score, adjust and rank a catalog for one query."""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..models.context import QueryContext
from ..models.intent import AnalyzedIntent, ClassificationResult
from ..models.record import ServiceRecord
from ..models.result import ScoredRecord
from ..utils.text_processing import TextProcessor
from ..utils.validators import validate_cap, validate_context, validate_query_text
from .adjuster import DEFAULT_WEIGHTS, AdjustmentWeights, adjust
from .catalog import CatalogSnapshot, CatalogStore
from .ranker import DEFAULT_RESULT_CAP, rank
from .scoring import score

logger = logging.getLogger(__name__)

Classify = Callable[[str], Union[ClassificationResult, AnalyzedIntent]]

_processor = TextProcessor()


def _as_snapshot(catalog: Union[CatalogSnapshot, Iterable[ServiceRecord]]) -> CatalogSnapshot:
    if isinstance(catalog, CatalogSnapshot):
        return catalog
    return CatalogSnapshot.build(catalog)


def _as_classification(value: Union[ClassificationResult, AnalyzedIntent, None]) -> ClassificationResult:
    if value is None:
        return ClassificationResult.ok(AnalyzedIntent.empty())
    if isinstance(value, AnalyzedIntent):
        return ClassificationResult.ok(value)
    return value


def score_catalog(
    snapshot: CatalogSnapshot,
    normalized_query: str,
    expansion_terms: Sequence[str],
    context: QueryContext,
    weights: AdjustmentWeights = DEFAULT_WEIGHTS,
) -> List[ScoredRecord]:
    """
    Score and context-adjust every record of a snapshot.

    Args:
        snapshot: Catalog version to score
        normalized_query: Query after normalization
        expansion_terms: Lower-cased semantic expansion terms
        context: Context captured for the turn
        weights: Context signal weights

    Returns:
        One ScoredRecord per catalog entry, in catalog order
    """
    browse = not normalized_query
    scored = []
    for entry in snapshot:
        base = score(entry.digest, entry.normalized_name, normalized_query, expansion_terms)
        final = adjust(base, entry.record, context, weights, browse)
        scored.append(ScoredRecord(record=entry.record, score=final, position=entry.position))
    return scored


def run_pipeline(
    normalized_query: str,
    snapshot: CatalogSnapshot,
    context: QueryContext,
    classification: ClassificationResult,
    cap: int = DEFAULT_RESULT_CAP,
    weights: AdjustmentWeights = DEFAULT_WEIGHTS,
) -> List[ServiceRecord]:
    """Score, adjust and rank a snapshot for an already normalized query."""
    terms = classification.intent.expansion_terms
    # The query itself is already scored by exact containment
    terms = [t for t in terms if t != normalized_query]
    scored = score_catalog(snapshot, normalized_query, terms, context, weights)
    return rank(scored, cap)


def search(
    query: str,
    catalog: Union[CatalogSnapshot, Iterable[ServiceRecord]],
    context: Optional[QueryContext] = None,
    classify: Optional[Classify] = None,
    cap: int = DEFAULT_RESULT_CAP,
    weights: AdjustmentWeights = DEFAULT_WEIGHTS,
) -> List[ServiceRecord]:
    """
    Rank a catalog for a raw query.

    Args:
        query: Raw query text; empty means browse by popularity
        catalog: Catalog snapshot, or plain records (digests built on the fly)
        context: User context filters (None = no filters)
        classify: Optional intent classifier called once with the raw query
        cap: Maximum number of results
        weights: Context signal weights

    Returns:
        Ranked records

    Raises:
        ValidationError: If query, context or cap is invalid
    """
    context = context or QueryContext()
    validate_query_text(query)
    validate_context(context)
    validate_cap(cap)

    normalized = _processor.normalize(query)
    classification = _as_classification(classify(query) if classify and normalized else None)

    return run_pipeline(normalized, _as_snapshot(catalog), context, classification, cap, weights)


class ServiceSearchEngine:
    """
    Ranking engine over a catalog store.

    Runs scoring passes in a thread pool so the event loop stays free
    while large catalogs are scored.
    """

    def __init__(
        self,
        catalog: Optional[CatalogStore] = None,
        result_cap: int = DEFAULT_RESULT_CAP,
        weights: AdjustmentWeights = DEFAULT_WEIGHTS,
        max_workers: int = 4,
    ):
        """
        Initialize search engine.

        Args:
            catalog: Catalog store (an empty one is created if omitted)
            result_cap: Default maximum number of results
            weights: Context signal weights
            max_workers: Number of worker threads
        """
        validate_cap(result_cap)
        self.catalog = catalog or CatalogStore()
        self.result_cap = result_cap
        self.weights = weights
        self.text_processor = TextProcessor()
        self.executor = ThreadPoolExecutor(max_workers=max_workers)

        self._stats = {
            "total_searches": 0,
            "empty_results": 0,
            "avg_search_time": 0.0,
        }

        logger.info("Service search engine initialized")

    def normalize(self, query: str) -> str:
        """Validate and normalize a raw query."""
        validate_query_text(query)
        return self.text_processor.normalize(query)

    async def rank(
        self,
        normalized_query: str,
        context: QueryContext,
        classification: ClassificationResult,
        snapshot: Optional[CatalogSnapshot] = None,
        cap: Optional[int] = None,
    ) -> List[ServiceRecord]:
        """
        Rank a catalog snapshot for a normalized query.

        Args:
            normalized_query: Query after normalization
            context: Context captured for the turn
            classification: Intent classification for the turn
            snapshot: Snapshot to score (current catalog if omitted)
            cap: Maximum number of results (engine default if omitted)

        Returns:
            Ranked records
        """
        validate_context(context)
        cap = self.result_cap if cap is None else cap
        validate_cap(cap)
        if snapshot is None:
            snapshot = self.catalog.snapshot

        start_time = time.perf_counter()
        results = await asyncio.get_running_loop().run_in_executor(
            self.executor,
            run_pipeline,
            normalized_query,
            snapshot,
            context,
            classification,
            cap,
            self.weights,
        )
        search_time = time.perf_counter() - start_time
        self._update_search_stats(search_time, len(results))

        logger.info(
            f"Ranked {len(results)}/{len(snapshot)} records for {normalized_query!r} "
            f"in {search_time:.3f}s (catalog v{snapshot.version})"
        )
        return results

    def _update_search_stats(self, search_time: float, result_count: int) -> None:
        """Update search performance statistics."""
        self._stats["total_searches"] += 1
        if result_count == 0:
            self._stats["empty_results"] += 1

        total_searches = self._stats["total_searches"]
        current_avg = self._stats["avg_search_time"]
        self._stats["avg_search_time"] = (
            (current_avg * (total_searches - 1) + search_time) / total_searches
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        return {
            **self._stats,
            **self.catalog.get_stats(),
            "result_cap": self.result_cap,
        }

    async def close(self) -> None:
        """Clean up resources."""
        self.executor.shutdown(wait=True)
        logger.info("Service search engine closed")
