import asyncio
import threading
from typing import Dict, List

import pytest

from review_evals.packages.evaluation_framework import (
    LabeledQuery,
    LabeledQuerySet,
    RetrievedResult,
    SearchIndex,
)


class FixedIndex(SearchIndex):
    """Returns a canned ranked list per question, truncated to the limit."""

    name = "fixed"

    def __init__(self, ranked: Dict[str, List[str]]):
        self.ranked = ranked
        self.calls = []

    async def search(self, query, limit):
        self.calls.append((query, limit))
        return [RetrievedResult(id=doc_id) for doc_id in self.ranked.get(query, [])[:limit]]


class HangingIndex(SearchIndex):
    """Never answers."""

    name = "hanging"

    async def search(self, query, limit):
        await asyncio.Event().wait()


class ThreadBlockingIndex(SearchIndex):
    """Blocks a worker thread, like a pymongo call against a hung cluster."""

    name = "thread-blocking"

    def __init__(self, block_for: float = 5.0):
        self.block_for = block_for
        self.release = threading.Event()

    async def search(self, query, limit):
        await asyncio.to_thread(self.release.wait, self.block_for)
        return [RetrievedResult(id="late")]


class DictIndex(SearchIndex):
    """Returns plain mappings instead of RetrievedResult."""

    name = "dict"

    def __init__(self, ranked: Dict[str, List[dict]]):
        self.ranked = ranked

    async def search(self, query, limit):
        return self.ranked.get(query, [])[:limit]


class FailingIndex(SearchIndex):
    name = "failing"

    async def search(self, query, limit):
        raise ConnectionError("index unavailable")


class CountingIndex(SearchIndex):
    """Tracks how many searches are in flight at once."""

    name = "counting"

    def __init__(self, delay: float = 0.01):
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self.started = []

    async def search(self, query, limit):
        self.started.append(query)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        return [RetrievedResult(id="doc")]


def make_queries(expected_ids):
    return [
        LabeledQuery(question=f"question {i} about {doc_id}", expected_id=doc_id)
        for i, doc_id in enumerate(expected_ids)
    ]


@pytest.fixture
def abc_queries():
    return make_queries(["a", "b", "c"])


@pytest.fixture
def abc_query_set(abc_queries):
    return LabeledQuerySet(abc_queries)


@pytest.fixture
def abc_index(abc_queries):
    """Scenario index: hit+miss, two misses, duplicate hit."""
    return FixedIndex({
        abc_queries[0].question: ["a", "x"],
        abc_queries[1].question: ["y", "z"],
        abc_queries[2].question: ["c", "c"],
    })
