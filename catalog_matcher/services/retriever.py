"""Candidate retrieval: embed the query text, search the vector index."""

import logging
from typing import List, Optional

from ..config import MatchingSettings
from ..schemas.products import CandidateMatch, NormalizedFilterSet
from .embeddings import EmbeddingService
from .vector_index import QdrantIndex

logger = logging.getLogger(__name__)


class CandidateRetriever:
    """Finds the nearest catalog products for a query text under exact filters."""

    def __init__(self, embeddings: EmbeddingService, index: QdrantIndex, matching: MatchingSettings):
        self.embeddings = embeddings
        self.index = index
        self.default_limit = matching.search_limit
        self.default_score_threshold = matching.search_score_threshold

    async def retrieve(
        self,
        query_text: str,
        filters: Optional[NormalizedFilterSet] = None,
        limit: Optional[int] = None,
        score_threshold: Optional[float] = None,
    ) -> List[CandidateMatch]:
        """Embed ``query_text`` once and return up to ``limit`` candidates, best first.

        Args:
            query_text: Text built by the query builder
            filters: Exact-match conditions; empty means unfiltered
            limit: Maximum candidates, defaults to the configured search limit
            score_threshold: Minimum raw similarity, defaults to the configured threshold

        Raises:
            ConfigurationError: If the embedding provider is not configured
        """
        vector = await self.embeddings.embed_one(query_text)
        candidates = await self.index.search(
            vector,
            limit=limit if limit is not None else self.default_limit,
            score_threshold=score_threshold if score_threshold is not None else self.default_score_threshold,
            filters=filters or {},
        )
        logger.debug(f"Retrieved {len(candidates)} candidates for '{query_text}' with filters {filters}")
        return candidates
