"""Catalog store holding service records and their precomputed search digests."""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..models.record import ServiceRecord, ServiceRecordModel
from ..utils.text_processing import TextProcessor
from .exceptions import CatalogError

logger = logging.getLogger(__name__)

_text_processor = TextProcessor()


def build_digest(record: ServiceRecord) -> str:
    """Search digest of a record: name, short name, tag and category, lower-cased."""
    return _text_processor.build_digest(
        record.name, record.short_name, record.tag, record.category
    )


def normalize_name(record: ServiceRecord) -> str:
    """Record name in query form, so name bonuses compare like with like."""
    return _text_processor.normalize(record.name)


@dataclass(frozen=True)
class CatalogEntry:
    """A record with its digest, query-form name and catalog position."""
    record: ServiceRecord
    digest: str
    position: int
    normalized_name: str = ""


@dataclass(frozen=True)
class CatalogSnapshot:
    """
    Immutable view of one catalog version.

    Attributes:
        version: Monotonically increasing catalog version
        entries: Records with their digests, in catalog order
    """
    version: int
    entries: Tuple[CatalogEntry, ...]

    @classmethod
    def build(cls, records: Iterable[ServiceRecord], version: int = 0) -> "CatalogSnapshot":
        """Precompute digests for every record and freeze them into a snapshot."""
        entries = tuple(
            CatalogEntry(
                record=record,
                digest=build_digest(record),
                position=position,
                normalized_name=normalize_name(record),
            )
            for position, record in enumerate(records)
        )
        return cls(version=version, entries=entries)

    @property
    def records(self) -> List[ServiceRecord]:
        return [entry.record for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)


def records_from_rows(rows: Iterable[Mapping[str, Any]]) -> List[ServiceRecord]:
    """
    Validate flat key/value import rows into service records.

    Rows with neither a name nor a code are skipped; other malformed cells
    fall back to field defaults.

    Args:
        rows: Header-driven rows (Chinese catalog headers or field names)

    Returns:
        Records in row order

    Raises:
        CatalogError: If a row is not a mapping
    """
    records: List[ServiceRecord] = []
    skipped = 0

    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise CatalogError(f"Row {index} is not a key/value record: {type(row).__name__}")

        try:
            model = ServiceRecordModel.model_validate(dict(row))
        except PydanticValidationError as e:
            logger.warning(f"Skipping row {index}: {e.error_count()} invalid fields")
            skipped += 1
            continue

        if not model.name and not model.code:
            logger.warning(f"Skipping row {index}: no name or code")
            skipped += 1
            continue

        records.append(model.to_record())

    if skipped:
        logger.info(f"Imported {len(records)} records, skipped {skipped}")
    return records


class CatalogStore:
    """
    Owner of the canonical catalog.

    Every replacement builds a complete new snapshot and swaps a single
    reference, so a search that captured the previous snapshot keeps
    scoring a consistent catalog.
    """

    def __init__(self, records: Iterable[ServiceRecord] = ()):
        """
        Initialize catalog store.

        Args:
            records: Initial catalog records
        """
        self._swap_lock = threading.Lock()
        self._snapshot = CatalogSnapshot.build(records, version=0)
        logger.info(f"Catalog store initialized with {len(self._snapshot)} records")

    @property
    def snapshot(self) -> CatalogSnapshot:
        """Current catalog version."""
        return self._snapshot

    @property
    def version(self) -> int:
        return self._snapshot.version

    def replace(self, records: Sequence[ServiceRecord]) -> CatalogSnapshot:
        """
        Replace the whole catalog.

        Args:
            records: New catalog records

        Returns:
            The new snapshot
        """
        records = list(records)
        for record in records:
            if not isinstance(record, ServiceRecord):
                raise CatalogError(f"Invalid catalog record type: {type(record).__name__}")

        with self._swap_lock:
            snapshot = CatalogSnapshot.build(records, version=self._snapshot.version + 1)
            self._snapshot = snapshot

        logger.info(f"Catalog replaced: version {snapshot.version}, {len(snapshot)} records")
        return snapshot

    def import_rows(self, rows: Iterable[Mapping[str, Any]]) -> CatalogSnapshot:
        """Validate import rows and replace the catalog with them."""
        return self.replace(records_from_rows(rows))

    def get_stats(self) -> Dict[str, Any]:
        """Get catalog statistics."""
        snapshot = self._snapshot
        return {
            "catalog_version": snapshot.version,
            "total_records": len(snapshot),
            "high_frequency_records": sum(1 for e in snapshot if e.record.high_frequency),
        }
