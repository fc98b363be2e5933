"""
Bounded execution of search calls: a concurrency ceiling plus a per-query timeout.
"""

import asyncio
import logging
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from .models import LabeledQuery, RetrievedResult
from .progress import ProgressTracker
from .search_index import SearchIndex

logger = logging.getLogger(__name__)


def _as_result(record: Any) -> RetrievedResult:
    """Accept RetrievedResult, mappings, or any object with an `id` attribute."""
    if isinstance(record, RetrievedResult):
        return record
    if isinstance(record, Mapping):
        return RetrievedResult.model_validate(dict(record))
    return RetrievedResult.model_validate(record, from_attributes=True)


def _discard_outcome(task: asyncio.Task) -> None:
    """Consume the late outcome of an abandoned search so it is never reported or reused."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(f"Abandoned search finished late with error: {exc}")
    else:
        logger.debug("Abandoned search finished late, result discarded")


class BoundedExecutor:
    """Runs queries against a search index with at most `concurrency` calls in flight.

    Each call races a `timeout` second timer. A timeout or any adapter error is a soft
    failure: the query gets an empty result list and the run carries on. Timed-out
    calls are cancelled and detached, their eventual result is dropped.
    """

    def __init__(self, index: SearchIndex, concurrency: int, timeout: float):
        """Initialize executor for one pass over the query set."""
        if concurrency < 1:
            raise ValueError(f"Concurrency must be at least 1, got {concurrency}")
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {timeout}")

        self.index = index
        self.concurrency = concurrency
        self.timeout = timeout
        self.soft_failures = 0
        self._semaphore = asyncio.Semaphore(concurrency)

    async def run_query(
        self,
        query: LabeledQuery,
        k: int,
        progress: Optional[ProgressTracker] = None
    ) -> List[RetrievedResult]:
        """Search one query at depth k; never raises for adapter timeouts or errors."""
        async with self._semaphore:
            results = await self._search_with_timeout(query, k)

        if progress is not None:
            progress.report_completion()
        return results

    async def run_all(
        self,
        queries: Sequence[LabeledQuery],
        k: int,
        progress: Optional[ProgressTracker] = None
    ) -> List[List[RetrievedResult]]:
        """Submit every query in order; results come back in submission order."""
        logger.info(f"Running {len(queries)} queries at k={k} "
                    f"(concurrency={self.concurrency}, timeout={self.timeout}s)")
        return await asyncio.gather(*(self.run_query(q, k, progress) for q in queries))

    async def _search_with_timeout(self, query: LabeledQuery, k: int) -> List[RetrievedResult]:
        task = asyncio.ensure_future(self.index.search(query.question, k))

        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout)
        except asyncio.CancelledError:
            # Caller gave up on us, do not leave the search dangling
            task.cancel()
            task.add_done_callback(_discard_outcome)
            raise

        if not done:
            task.cancel()
            task.add_done_callback(_discard_outcome)
            self.soft_failures += 1
            logger.warning(f"Search timed out after {self.timeout}s for query: '{query.question}'")
            return []

        if task.cancelled():
            self.soft_failures += 1
            logger.warning(f"Search was cancelled for query: '{query.question}'")
            return []

        exc = task.exception()
        if exc is not None:
            self.soft_failures += 1
            logger.warning(f"Search failed for query '{query.question}': {exc}")
            return []

        try:
            results = [_as_result(record) for record in (task.result() or [])]
        except (ValidationError, TypeError) as e:
            self.soft_failures += 1
            logger.warning(f"Search returned malformed records for query '{query.question}': {e}")
            return []

        logger.debug(f"Retrieved {len(results)} results for query: '{query.question}'")
        return results[:k]
