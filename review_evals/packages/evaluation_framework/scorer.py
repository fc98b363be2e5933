"""
Depth sweep scorer for computing precision and recall per retrieval depth.
"""

import asyncio
import logging
from typing import List, Sequence

from .classifier import hit_vector
from .dataset import LabeledQuerySet
from .executor import BoundedExecutor
from .models import MISS, DepthRunResult, HitVector, LabeledQuery
from .progress import ProgressTracker
from .search_index import SearchIndex

logger = logging.getLogger(__name__)


def score(hit_vectors: Sequence[HitVector], depth: int, soft_failures: int = 0) -> DepthRunResult:
    """Aggregate hit vectors collected at one depth.

    precision = hits / returned slots, recall = hits / queries. Each query has exactly
    one relevant review, so recall is the share of queries whose review showed up.
    Both are 0.0 when their denominator is 0.
    """
    num_queries = len(hit_vectors)
    total_retrievals = sum(len(hits) for hits in hit_vectors)
    true_positives = sum(1 for hits in hit_vectors for hit in hits if hit != MISS)

    precision = true_positives / total_retrievals if total_retrievals > 0 else 0.0
    recall = true_positives / num_queries if num_queries > 0 else 0.0

    return DepthRunResult(
        depth=depth,
        precision=precision,
        recall=recall,
        queries=num_queries,
        total_retrievals=total_retrievals,
        true_positives=true_positives,
        soft_failures=soft_failures,
    )


class DepthSweepScorer:
    """Evaluates a search index over a labeled query set at several depths."""

    def __init__(
        self,
        index: SearchIndex,
        depths: List[int],
        concurrency: int,
        timeout: float,
        parallel_depths: bool = True,
        show_progress: bool = True
    ):
        """Initialize scorer with the depth sweep and execution limits."""
        logger.info("Initializing depth sweep scorer")
        if not depths:
            raise ValueError("Depth sweep must contain at least one depth")
        invalid = [k for k in depths if k < 1]
        if invalid:
            raise ValueError(f"Depths must be positive integers, got {invalid}")

        self.index = index
        self.depths = list(depths)
        self.concurrency = concurrency
        self.timeout = timeout
        self.parallel_depths = parallel_depths
        self.show_progress = show_progress
        logger.info(f"Depth sweep scorer initialized with depths={self.depths}")

    async def evaluate_depth(
        self,
        queries: Sequence[LabeledQuery],
        k: int,
        position: int = 0
    ) -> DepthRunResult:
        """Run every query at depth k and score the hit vectors."""
        # Fresh executor per pass so the ceiling applies to this depth's queries
        executor = BoundedExecutor(self.index, self.concurrency, self.timeout)
        progress = ProgressTracker(
            total=len(queries),
            label=f"k={k}",
            position=position,
            enabled=self.show_progress
        )
        try:
            all_results = await executor.run_all(queries, k, progress)
        finally:
            progress.close()

        hit_vectors = [hit_vector(query, results) for query, results in zip(queries, all_results)]
        result = score(hit_vectors, k, soft_failures=executor.soft_failures)

        if executor.soft_failures:
            logger.warning(f"{executor.soft_failures}/{len(queries)} queries at k={k} "
                           f"timed out or failed")
        logger.info(f"k={k}: precision={result.precision:.3f} recall={result.recall:.3f}")
        return result

    async def run(self, query_set: LabeledQuerySet) -> List[DepthRunResult]:
        """Evaluate every depth; results are ordered like `depths`."""
        queries = query_set.get_queries()
        logger.info(f"Scoring {len(queries)} queries for k = {self.depths}")

        if self.parallel_depths:
            return list(await asyncio.gather(*(
                self.evaluate_depth(queries, k, position)
                for position, k in enumerate(self.depths)
            )))

        results = []
        for k in self.depths:
            results.append(await self.evaluate_depth(queries, k))
        return results

    def run_sync(self, query_set: LabeledQuerySet) -> List[DepthRunResult]:
        """Blocking entry point for scripts.

        Unlike asyncio.run, closing the loop does not join executor threads, so a search
        still stuck in a worker thread after its timeout cannot hold up the report.
        """
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(self.run(query_set))
        finally:
            try:
                self._cancel_leftover_tasks(loop)
                loop.run_until_complete(loop.shutdown_asyncgens())
            finally:
                loop.close()

    @staticmethod
    def _cancel_leftover_tasks(loop: asyncio.AbstractEventLoop) -> None:
        leftover = [task for task in asyncio.all_tasks(loop) if not task.done()]
        if not leftover:
            return
        logger.debug(f"Cancelling {len(leftover)} abandoned search tasks")
        for task in leftover:
            task.cancel()
        loop.run_until_complete(asyncio.gather(*leftover, return_exceptions=True))
