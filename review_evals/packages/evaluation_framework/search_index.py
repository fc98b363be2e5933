"""
Abstract search index interface for evaluation framework.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from .models import QueryText, RetrievedResult

logger = logging.getLogger(__name__)


class SearchIndex(ABC):
    """Abstract interface for any search index you evaluate.

    Implementations may be slow, hang, or raise. The evaluator guards every call
    with its own timeout, so adapters do not need to provide one.
    """

    name: str = "search-index"

    @abstractmethod
    async def search(self, query: QueryText, limit: int) -> List[RetrievedResult]:
        """Return up to `limit` results for a query, best match first."""
        pass

    def close(self) -> None:
        """Release resources held by the index. Must not wait for searches still running."""
        pass
