"""
Vector search over product reviews stored in MongoDB Atlas.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

from pymongo import MongoClient

from review_evals.packages.embedding_service import EmbeddingService
from review_evals.packages.evaluation_framework import QueryText, RetrievedResult, SearchIndex

logger = logging.getLogger(__name__)

MAX_LIMIT = 100


class MongoReviewSearchIndex(SearchIndex):
    """Search index adapter backed by an Atlas `$vectorSearch` over the reviews collection."""

    name = "mongodb-vector"

    def __init__(
        self,
        mongo_client: MongoClient,
        database_name: str,
        collection_name: str,
        embedding_service: EmbeddingService,
        vector_index_name: str = "default_vector",
        embedding_path: str = "embeddings",
        max_workers: int = 10
    ):
        """Initialize review search index.

        Blocking lookups run on a pool owned by the index; size it for every search that
        can be in flight at once (concurrency times parallel depths).
        """
        self.mongo_client = mongo_client
        self.database_name = database_name
        self.collection_name = collection_name
        self.embedding_service = embedding_service
        self.vector_index_name = vector_index_name
        self.embedding_path = embedding_path
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="review-search")

    async def search(self, query: QueryText, limit: int) -> List[RetrievedResult]:
        """Search reviews for a question. pymongo and OpenAI block, so run off the event loop."""
        if limit < 1 or limit > MAX_LIMIT:
            logger.error(f"Invalid limit: {limit}. Must be between 1 and {MAX_LIMIT}.")
            raise ValueError(f"Limit must be between 1 and {MAX_LIMIT}, got {limit}")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._pool, self.search_blocking, query, limit)

    def close(self) -> None:
        """Stop the lookup pool without joining threads stuck on a hung call."""
        logger.info("Shutting down review search pool")
        self._pool.shutdown(wait=False, cancel_futures=True)

    def search_blocking(self, query: str, limit: int) -> List[RetrievedResult]:
        """Embed the question and run the vector search in the calling thread."""
        logger.debug(f"Running vector search for query: '{query}' and limit {limit}")

        try:
            query_vector = self.embedding_service.generate_embedding(query)

            collection = self.mongo_client[self.database_name][self.collection_name]
            results = list(collection.aggregate(self._build_pipeline(query_vector, limit)))
        except Exception as e:
            logger.error(f"Search error for query '{query}': {e}")
            raise

        logger.debug(f"Vector search returned {len(results)} results")
        return [RetrievedResult(**doc) for doc in results]

    def _build_pipeline(self, query_vector: List[float], limit: int) -> List[Dict[str, Any]]:
        return [
            {
                "$vectorSearch": {
                    "index": self.vector_index_name,
                    "path": self.embedding_path,
                    "queryVector": query_vector,
                    # Typically 10-20x the limit
                    "numCandidates": limit * 10,
                    "limit": limit
                }
            },
            {
                "$project": {
                    "_id": 0,
                    "id": 1,
                    "product_title": 1,
                    "review": 1,
                    "search_score": {"$meta": "vectorSearchScore"}
                }
            }
        ]
