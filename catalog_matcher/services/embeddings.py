"""Text embedding service used for both catalog ingestion and query-time search."""

import logging
from typing import List, Optional

from ..ai.base import RetryPolicy
from ..ai.providers.base import BaseProvider
from ..utils.errors import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

QUERY_TASK = "retrieval_query"
DOCUMENT_TASK = "retrieval_document"


class EmbeddingService:
    """Wraps an embedding-capable provider with dimension checks and retries."""

    def __init__(self, provider: BaseProvider, dimensions: int, policy: Optional[RetryPolicy] = None):
        """Initialize the service.

        Args:
            provider: Provider that serves embeddings
            dimensions: Expected vector length; must match the vector index
            policy: Timeout/retry policy for every embedding call
        """
        self.provider = provider
        self.dimensions = dimensions
        self.policy = policy or RetryPolicy()

    @property
    def is_configured(self) -> bool:
        return self.provider.is_configured

    async def embed(self, texts: List[str], task_type: str = QUERY_TASK) -> List[List[float]]:
        """Embed ``texts`` in order.

        Raises:
            ConfigurationError: If the provider has no API key
            ProviderError: If the provider fails or returns vectors of the wrong size
        """
        if not self.is_configured:
            raise ConfigurationError(
                "Embedding service not configured", details={"provider": self.provider.provider}
            )
        if not texts:
            return []

        vectors = await self.policy.run(
            lambda: self.provider.get_embeddings(texts, task_type=task_type),
            description=f"{self.provider.provider} embeddings",
        )

        if len(vectors) != len(texts):
            raise ProviderError(f"Expected {len(texts)} embeddings, got {len(vectors)}")
        for vector in vectors:
            if len(vector) != self.dimensions:
                raise ProviderError(
                    f"Embedding dimension mismatch: expected {self.dimensions}, got {len(vector)}",
                    details={"expected": self.dimensions, "actual": len(vector)},
                )

        logger.debug(f"Embedded {len(texts)} texts ({task_type})")
        return vectors

    async def embed_one(self, text: str, task_type: str = QUERY_TASK) -> List[float]:
        """Embed a single text."""
        vectors = await self.embed([text], task_type=task_type)
        return vectors[0]
