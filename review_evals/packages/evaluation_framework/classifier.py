"""
Hit classification: mark each retrieved result as a hit or a miss.
"""

from typing import Iterable, List

from .models import MISS, DocumentId, HitVector, LabeledQuery, RetrievedResult


def classify_hits(expected_id: DocumentId, result_ids: Iterable[str]) -> HitVector:
    """Map ranked result ids to a parallel hit vector.

    A slot holds `expected_id` when the result matches and MISS otherwise. Order and
    length follow the input; duplicates are kept.
    """
    return [expected_id if result_id == expected_id else MISS for result_id in result_ids]


def hit_vector(query: LabeledQuery, results: List[RetrievedResult]) -> HitVector:
    """Classify search results for one labeled query."""
    return classify_hits(query.expected_id, (result.id for result in results))
