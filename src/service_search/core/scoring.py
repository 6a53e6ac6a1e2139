"""Relevance scoring of a record digest against a normalized query."""

from typing import Optional, Sequence

from ..utils.text_processing import TextProcessor

# Signal weights
EXACT_CONTAINMENT_SCORE = 100.0
NAME_PREFIX_BONUS = 30.0
NAME_EQUALS_BONUS = 50.0
SYNONYM_SCORE = 60.0
COVERAGE_WEIGHT = 40.0
COVERAGE_THRESHOLD = 0.6

# Every record gets this score when the query normalizes to nothing
BROWSE_BASELINE_SCORE = 100.0


def score(
    digest: str,
    name: str,
    query: str,
    synonyms: Sequence[str] = (),
) -> Optional[float]:
    """
    Score how relevant a record is to a query.

    Args:
        digest: Record search digest (lower-cased)
        name: Record name in normalized query form
        query: Normalized query
        synonyms: Lower-cased semantic expansion terms

    Returns:
        Relevance score, or None if no signal qualifies the record
    """
    if not query:
        return BROWSE_BASELINE_SCORE

    total = 0.0
    relevant = False

    # Exact containment
    if query in digest:
        total += EXACT_CONTAINMENT_SCORE
        relevant = True
        lowered_name = name.lower()
        if lowered_name.startswith(query):
            total += NAME_PREFIX_BONUS
        if lowered_name == query:
            total += NAME_EQUALS_BONUS

    # Synonym containment
    for term in synonyms:
        if term and term in digest:
            total += SYNONYM_SCORE
            relevant = True

    # Character coverage
    coverage = TextProcessor.character_coverage(query, digest)
    if coverage > COVERAGE_THRESHOLD:
        total += coverage * COVERAGE_WEIGHT
        relevant = True

    if not relevant:
        return None
    return total
