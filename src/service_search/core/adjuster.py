"""Context adjustments applied on top of the relevance score."""

import math
from dataclasses import dataclass
from typing import Optional

from ..models.context import QueryContext
from ..models.record import ServiceRecord


@dataclass(frozen=True)
class AdjustmentWeights:
    """
    Weights of the context signals.

    The defaults are the current ranking policy. Earlier policies (for
    example a -10 out-of-region penalty) can be reproduced by passing
    different weights.
    """
    applicant_match: float = 20.0
    applicant_mismatch: float = -20.0
    region_match: float = 20.0
    region_province_wide: float = 5.0
    region_mismatch: float = -50.0
    popularity_factor: float = 8.0
    high_frequency: float = 10.0
    satisfaction_factor: float = 2.0


DEFAULT_WEIGHTS = AdjustmentWeights()


def adjust(
    base_score: Optional[float],
    record: ServiceRecord,
    context: QueryContext,
    weights: AdjustmentWeights = DEFAULT_WEIGHTS,
    browse: bool = False,
) -> Optional[float]:
    """
    Apply context filters and boosts to a relevance score.

    Args:
        base_score: Relevance score, or None if the record is not relevant
        record: Record being ranked
        context: Context captured for the turn
        weights: Signal weights
        browse: Empty-query pass; only popularity and the context filters apply

    Returns:
        Adjusted score, or None if the record is filtered out
    """
    if base_score is None:
        return None

    # Channel is a hard filter
    if context.channel is not None and context.channel not in record.channels:
        return None

    adjusted = base_score

    if context.applicant_type is not None:
        if record.applicant_type == context.applicant_type:
            adjusted += weights.applicant_match
        else:
            adjusted += weights.applicant_mismatch

    if context.region is not None:
        if context.region in record.region:
            adjusted += weights.region_match
        elif record.is_province_wide:
            adjusted += weights.region_province_wide
        else:
            adjusted += weights.region_mismatch

    if record.visit_count > 0:
        adjusted += math.log10(record.visit_count + 1) * weights.popularity_factor

    if browse:
        return adjusted

    if record.high_frequency:
        adjusted += weights.high_frequency

    if context.satisfaction_weighted and record.satisfaction is not None:
        adjusted += record.satisfaction * weights.satisfaction_factor

    return adjusted
