"""
Embedding services for turning question text into query vectors.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from openai import OpenAI

logger = logging.getLogger(__name__)


class EmbeddingService(ABC):
    """Anything that can embed a piece of text."""

    @abstractmethod
    def generate_embedding(self, text: str) -> List[float]:
        pass


class OpenAIEmbeddingService(EmbeddingService):
    """Service for generating embeddings using OpenAI API."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimensions: int = 512,
        timeout: Optional[float] = None,
        max_retries: int = 2
    ):
        """Initialize OpenAI embedding service.

        Model and dimensions must match the ones the reviews were embedded with.
        """
        client_kwargs = {"api_key": api_key, "max_retries": max_retries}
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        self.client = OpenAI(**client_kwargs)
        self.model = model
        self.dimensions = dimensions
        logger.info(f"Initialized OpenAI embedding service with model: {model}, "
                    f"dimensions: {dimensions}")

    def generate_embedding(self, text: str) -> List[float]:
        """Generate embedding vector for input text."""
        try:
            response = self.client.embeddings.create(
                input=text,
                model=self.model,
                dimensions=self.dimensions
            )
            return response.data[0].embedding
        except Exception as e:
            logger.error(f"Failed to generate embedding: {e}")
            raise
