"""
Evaluation Framework for Search Indexes

Runs labeled questions against a search index under a concurrency ceiling and a
per-query timeout, and scores precision/recall across retrieval depths.
"""

from .classifier import classify_hits, hit_vector
from .dataset import LabeledQuerySet
from .executor import BoundedExecutor
from .models import (
    MISS,
    DepthRunResult,
    DocumentId,
    HitVector,
    LabeledQuery,
    QueryText,
    RetrievedResult,
    SweepConfig,
    SweepReport,
)
from .progress import ProgressTracker
from .reporter import (
    compare_reports,
    load_report,
    log_summary,
    render_table,
    save_report,
    to_records,
)
from .scorer import DepthSweepScorer, score
from .search_index import SearchIndex

__all__ = [
    "MISS",
    "DocumentId",
    "QueryText",
    "HitVector",
    "LabeledQuery",
    "RetrievedResult",
    "DepthRunResult",
    "SweepConfig",
    "SweepReport",
    "LabeledQuerySet",
    "SearchIndex",
    "BoundedExecutor",
    "ProgressTracker",
    "classify_hits",
    "hit_vector",
    "score",
    "DepthSweepScorer",
    "to_records",
    "render_table",
    "log_summary",
    "save_report",
    "load_report",
    "compare_reports",
]
