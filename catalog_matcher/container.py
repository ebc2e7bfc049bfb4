"""Composition root: builds every service once from the settings object."""

import logging
from dataclasses import dataclass

from fastapi import Request

from .ai.base import RetryPolicy
from .ai.providers.factory import create_provider
from .config import PROVIDER_TYPE, Settings
from .services.catalog_ingestion import CatalogIngestionService
from .services.embeddings import EmbeddingService
from .services.extraction import CatalogExtractor
from .services.pipeline import CatalogPipeline
from .services.query_builder import QueryBuilder
from .services.reranker import BaseReranker, LLMReranker, RuleBasedReranker
from .services.retriever import CandidateRetriever
from .services.scoring import ScoreAdjuster
from .services.vector_index import QdrantIndex

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the routers need, shared through ``app.state.services``."""

    embeddings: EmbeddingService
    index: QdrantIndex
    extractor: CatalogExtractor
    retriever: CandidateRetriever
    pipeline: CatalogPipeline
    ingestion: CatalogIngestionService

    async def close(self) -> None:
        await self.index.close()


def build_reranker(settings: Settings, policy: RetryPolicy) -> BaseReranker:
    """LLM re-ranker when its provider has a key, the rule-based one otherwise."""
    provider = create_provider(settings.ai, settings.ai.rerank_provider, model=settings.ai.rerank_model)
    if provider.is_configured:
        return LLMReranker(provider, policy=policy)
    logger.warning(f"Re-rank provider {settings.ai.rerank_provider.value} not configured, using rule-based re-ranking")
    return RuleBasedReranker()


def build_services(settings: Settings) -> Services:
    """Wire the services for one application instance."""
    policy = RetryPolicy.from_settings(settings.ai)
    google = create_provider(settings.ai, PROVIDER_TYPE.GOOGLE, model=settings.ai.extraction_model)

    embeddings = EmbeddingService(google, dimensions=settings.ai.embedding_dimensions, policy=policy)
    if settings.ai.embedding_dimensions != settings.vector_index.vector_size:
        logger.warning(
            f"Embedding dimensions ({settings.ai.embedding_dimensions}) differ from the vector index size "
            f"({settings.vector_index.vector_size}); searches will be rejected"
        )

    index = QdrantIndex(settings.vector_index)
    extractor = CatalogExtractor(google, policy=policy)
    retriever = CandidateRetriever(embeddings, index, settings.matching)
    pipeline = CatalogPipeline(
        extractor=extractor,
        query_builder=QueryBuilder(settings.matching),
        retriever=retriever,
        score_adjuster=ScoreAdjuster.from_settings(settings.matching),
        reranker=build_reranker(settings, policy),
        rerank_by_default=settings.matching.rerank_enabled,
        rerank_max_concurrent=settings.ai.rerank_max_concurrent,
    )
    ingestion = CatalogIngestionService(embeddings, index, batch_size=settings.vector_index.upsert_batch_size)

    return Services(
        embeddings=embeddings,
        index=index,
        extractor=extractor,
        retriever=retriever,
        pipeline=pipeline,
        ingestion=ingestion,
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the application's services."""
    return request.app.state.services
