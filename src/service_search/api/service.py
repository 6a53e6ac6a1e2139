"""High-level API service for government service search."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, Mapping, Optional, Sequence

from ..config import IntentServiceConfig
from ..core.adjuster import DEFAULT_WEIGHTS, AdjustmentWeights
from ..core.catalog import CatalogSnapshot, CatalogStore
from ..core.engine import ServiceSearchEngine
from ..core.exceptions import ConfigurationError, SearchError, ValidationError
from ..core.intent import IntentClassifier
from ..core.ranker import DEFAULT_RESULT_CAP
from ..models.context import QueryContext
from ..models.intent import AnalyzedIntent, ClassificationResult
from ..models.record import ServiceRecord
from ..models.result import SearchResponse
from ..utils.logging_config import setup_logging
from ..utils.validators import validate_context, validate_records_batch

logger = logging.getLogger(__name__)


class ServiceSearchService:
    """
    High-level service interface for service search turns.

    Each call to ``search`` is a turn with its own generation id. A turn
    that is overtaken by a newer one while waiting on the intent service
    returns None and leaves ``latest_response`` untouched.
    """

    def __init__(
        self,
        records: Iterable[ServiceRecord] = (),
        intent_config: Optional[IntentServiceConfig] = None,
        classifier: Optional[IntentClassifier] = None,
        result_cap: int = DEFAULT_RESULT_CAP,
        weights: AdjustmentWeights = DEFAULT_WEIGHTS,
        adopt_intent_context: bool = True,
        max_workers: int = 4,
        log_level: str = "INFO"
    ):
        """
        Initialize service search service.

        Args:
            records: Initial catalog records
            intent_config: Intent service settings (read from env if omitted)
            classifier: Preconfigured intent classifier (overrides intent_config)
            result_cap: Default maximum number of results
            weights: Context signal weights
            adopt_intent_context: Fill unset applicant/region filters from the intent
            max_workers: Number of worker threads
            log_level: Logging level
        """
        setup_logging(level=log_level)
        if max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")

        self.catalog = CatalogStore(records)
        self.engine = ServiceSearchEngine(
            catalog=self.catalog,
            result_cap=result_cap,
            weights=weights,
            max_workers=max_workers
        )
        self.classifier = classifier or IntentClassifier(intent_config)
        self.adopt_intent_context = adopt_intent_context

        self._generation = 0
        self._latest: Optional[SearchResponse] = None
        self._superseded = 0
        logger.info("Service search service initialized")

    @property
    def current_generation(self) -> int:
        """Generation id of the most recently started turn."""
        return self._generation

    @property
    def latest_response(self) -> Optional[SearchResponse]:
        """Response of the newest turn that completed without being superseded."""
        return self._latest

    def replace_catalog(self, records: Sequence[ServiceRecord]) -> CatalogSnapshot:
        """
        Replace the whole catalog; the next turn sees the new version.

        Args:
            records: New catalog records

        Returns:
            The new catalog snapshot
        """
        validate_records_batch(records)
        return self.catalog.replace(records)

    def import_rows(self, rows: Iterable[Mapping[str, Any]]) -> CatalogSnapshot:
        """Import flat key/value rows as the new catalog."""
        return self.catalog.import_rows(rows)

    def begin_turn(self) -> int:
        """Start a new turn and return its generation id."""
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def search(
        self,
        query: str,
        context: Optional[QueryContext] = None,
        cap: Optional[int] = None,
    ) -> Optional[SearchResponse]:
        """
        Run one search turn.

        Args:
            query: Raw query text
            context: User context filters (None = no filters)
            cap: Maximum number of results

        Returns:
            Search response, or None if a newer turn superseded this one

        Raises:
            ValidationError: If query, context or cap is invalid
            SearchError: If ranking fails
        """
        normalized = self.engine.normalize(query)
        context = context or QueryContext()
        validate_context(context)

        generation = self.begin_turn()
        # Catalog and context are captured for the whole turn
        snapshot = self.catalog.snapshot
        start_time = time.perf_counter()

        if normalized:
            classification = await self.classifier.classify(query)
        else:
            classification = ClassificationResult.ok(AnalyzedIntent.empty())

        if not self.is_current(generation):
            return self._discard(generation, query)

        if classification.is_degraded:
            logger.debug(f"Turn {generation} scoring literally ({classification.degraded_reason.value})")

        if self.adopt_intent_context:
            context = context.with_intent(classification.intent)

        try:
            results = await self.engine.rank(normalized, context, classification, snapshot, cap)
        except ValidationError:
            raise
        except Exception as e:
            logger.error(f"Search failed: {str(e)}")
            raise SearchError(f"Search failed: {str(e)}") from e

        if not self.is_current(generation):
            return self._discard(generation, query)

        response = SearchResponse(
            generation=generation,
            query=query,
            normalized_query=normalized,
            results=results,
            classification=classification,
            context=context,
            catalog_version=snapshot.version,
            elapsed_seconds=time.perf_counter() - start_time,
        )
        self._latest = response
        logger.info(f"Turn {generation}: {len(results)} results for {query!r}")
        return response

    def _discard(self, generation: int, query: str) -> None:
        self._superseded += 1
        logger.info(
            f"Discarding turn {generation} for {query!r}: superseded by turn {self._generation}"
        )
        return None

    async def get_stats(self) -> Dict[str, Any]:
        """Get service and engine statistics."""
        return {
            "service": {
                "current_generation": self._generation,
                "superseded_turns": self._superseded,
                "adopt_intent_context": self.adopt_intent_context,
            },
            "engine": self.engine.get_stats(),
            "classifier": self.classifier.get_stats(),
        }

    async def health_check(self) -> Dict[str, Any]:
        """Perform health check."""
        try:
            stats = self.engine.get_stats()
            return {
                "status": "healthy" if stats["total_records"] > 0 else "empty_catalog",
                "catalog_version": stats["catalog_version"],
                "intent_service": "enabled" if self.classifier.enabled else "disabled",
            }
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            return {
                "status": "error",
                "message": str(e)
            }

    async def close(self) -> None:
        """Clean up resources and close the service."""
        try:
            await self.classifier.close()
            await self.engine.close()
            logger.info("Service closed successfully")
        except Exception as e:
            logger.error(f"Error during service shutdown: {str(e)}")

    @classmethod
    @asynccontextmanager
    async def create(cls, **kwargs: Any) -> AsyncIterator["ServiceSearchService"]:
        """
        Create and manage service lifecycle with context manager.

        Args:
            **kwargs: Service configuration

        Yields:
            Ready-to-use service
        """
        service = cls(**kwargs)
        try:
            yield service
        finally:
            await service.close()
