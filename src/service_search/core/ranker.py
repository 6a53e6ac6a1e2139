"""Ordering of scored records into the final result list."""

from typing import List, Sequence

import numpy as np

from ..models.record import ServiceRecord
from ..models.result import ScoredRecord
from ..utils.validators import validate_cap

DEFAULT_RESULT_CAP = 100


def rank(scored: Sequence[ScoredRecord], cap: int = DEFAULT_RESULT_CAP) -> List[ServiceRecord]:
    """
    Sort eligible records by score, best first.

    Records without a score or with a score <= 0 are dropped. Equal scores
    keep catalog order.

    Args:
        scored: Scored records
        cap: Maximum number of records to return

    Returns:
        Ranked records, at most ``cap`` of them

    Raises:
        ValidationError: If cap is not a positive integer
    """
    validate_cap(cap)

    eligible = sorted(
        (item for item in scored if item.is_eligible),
        key=lambda item: item.position,
    )
    if not eligible:
        return []

    scores = np.fromiter((item.score for item in eligible), dtype=float, count=len(eligible))
    # Stable sort on negated scores keeps catalog order among ties
    order = np.argsort(-scores, kind="stable")[:cap]

    return [eligible[i].record for i in order]
