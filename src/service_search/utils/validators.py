"""Input validation utilities."""

import logging
from typing import List, Sequence

from ..core.exceptions import ValidationError
from ..models.context import QueryContext
from ..models.record import ServiceRecord

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 500
MAX_RESULT_CAP = 10000


def validate_cap(cap: int) -> None:
    """
    Validate a result cap.

    Args:
        cap: Maximum number of results

    Raises:
        ValidationError: If cap is not a positive integer within limits
    """
    if isinstance(cap, bool) or not isinstance(cap, int):
        raise ValidationError(f"Result cap must be an integer, got {type(cap).__name__}")
    if cap <= 0:
        raise ValidationError("Result cap must be positive")
    if cap > MAX_RESULT_CAP:
        raise ValidationError(f"Result cap cannot exceed {MAX_RESULT_CAP}")


def validate_query_text(query: str) -> None:
    """
    Validate raw query text.

    An empty query is valid and means "browse popular services".

    Raises:
        ValidationError: If query is not a string or is too long
    """
    if not isinstance(query, str):
        raise ValidationError(f"Query must be a string, got {type(query).__name__}")
    if len(query) > MAX_QUERY_LENGTH:
        raise ValidationError(f"Query cannot exceed {MAX_QUERY_LENGTH} characters")


def validate_context(context: QueryContext) -> None:
    """
    Validate query context object.

    Raises:
        ValidationError: If context is invalid
    """
    if not isinstance(context, QueryContext):
        raise ValidationError("Invalid query context type")


def validate_records_batch(records: Sequence[ServiceRecord]) -> List[str]:
    """
    Validate a batch of catalog records.

    Duplicate codes are reported but kept, since each record is still
    rankable on its own.

    Args:
        records: Records to validate

    Returns:
        Codes that occur more than once

    Raises:
        ValidationError: If any entry is not a ServiceRecord
    """
    seen = set()
    duplicates: List[str] = []
    for i, record in enumerate(records):
        if not isinstance(record, ServiceRecord):
            raise ValidationError(f"Invalid record type at index {i}: {type(record).__name__}")
        if record.code and record.code in seen and record.code not in duplicates:
            duplicates.append(record.code)
        seen.add(record.code)

    if duplicates:
        logger.warning(f"Duplicate record codes in catalog: {', '.join(duplicates[:10])}")
    return duplicates
