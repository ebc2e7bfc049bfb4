"""Image to preview pipeline: extract, match against the catalog, optionally re-rank."""

import logging
import re
import time
from pathlib import PurePath
from typing import List, Optional

from ..schemas.pipeline import PipelineData, PipelineMetadata, PipelineResponse
from ..schemas.products import ExtractedProduct, PreviewItem
from ..utils.errors import ConfigurationError
from .extraction import CatalogExtractor
from .query_builder import QueryBuilder
from .reranker import BaseReranker, rerank_all
from .retriever import CandidateRetriever
from .scoring import ScoreAdjuster

logger = logging.getLogger(__name__)

UNKNOWN_WHOLESALER = "UNKNOWN"

_SEGMENT_SPLIT_RE = re.compile(r"[_\-\s]+")


def extract_wholesaler_tag(filename: Optional[str]) -> str:
    """First filename segment, upper-cased: ``"maxiconsumo_2024-05.jpg" -> "MAXICONSUMO"``."""
    if not filename:
        return UNKNOWN_WHOLESALER
    stem = PurePath(filename).stem
    for segment in _SEGMENT_SPLIT_RE.split(stem):
        if segment:
            return segment.upper()
    return UNKNOWN_WHOLESALER


class CatalogPipeline:
    """Runs the full matching flow for one catalog image."""

    def __init__(
        self,
        extractor: CatalogExtractor,
        query_builder: QueryBuilder,
        retriever: CandidateRetriever,
        score_adjuster: ScoreAdjuster,
        reranker: Optional[BaseReranker] = None,
        rerank_by_default: bool = False,
        rerank_max_concurrent: int = 5,
    ):
        self.extractor = extractor
        self.query_builder = query_builder
        self.retriever = retriever
        self.score_adjuster = score_adjuster
        self.reranker = reranker
        self.rerank_by_default = rerank_by_default
        self.rerank_max_concurrent = rerank_max_concurrent

    async def process(
        self,
        image: bytes,
        filename: Optional[str] = None,
        mime_type: str = "image/jpeg",
        company: Optional[str] = None,
        rerank: Optional[bool] = None,
    ) -> PipelineResponse:
        """Extract products from ``image`` and match each against the catalog.

        Args:
            image: Raw image bytes
            filename: Upload filename; its first segment becomes the wholesaler tag
            mime_type: MIME type of the image
            company: Optional wholesaler hint for the extraction prompt
            rerank: Override the configured re-ranking default

        Returns:
            The preview envelope; per-product failures appear as items with an error

        Raises:
            ConfigurationError: If the extraction or embedding provider is not configured
        """
        start = time.perf_counter()
        wholesaler_tag = extract_wholesaler_tag(filename)

        products = await self.extractor.extract(image, mime_type=mime_type, company=company)
        products = [product.model_copy(update={"wholesaler": wholesaler_tag}) for product in products]

        apply_rerank = self.rerank_by_default if rerank is None else rerank
        preview = await self.match_products(products, rerank=apply_rerank)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Processed {filename or 'image'} ({wholesaler_tag}): {len(preview)} products in {elapsed_ms:.0f}ms"
        )
        return PipelineResponse(
            data=PipelineData(products_processed=len(preview), preview=preview),
            metadata=PipelineMetadata(
                processing_time_ms=round(elapsed_ms, 2),
                wholesaler_tag=wholesaler_tag,
                company=company,
                reranked=apply_rerank and self.reranker is not None,
            ),
        )

    async def match_products(self, products: List[ExtractedProduct], rerank: bool = False) -> List[PreviewItem]:
        """Retrieve and score candidates for each product, then optionally re-rank.

        Retrieval runs one product at a time. Any failure other than a
        configuration error is recorded on that product's item and the batch
        carries on.
        """
        preview: List[PreviewItem] = []
        for product in products:
            preview.append(await self._match_one(product))

        if rerank and self.reranker is not None:
            preview = await rerank_all(self.reranker, preview, max_concurrent=self.rerank_max_concurrent)
        elif rerank:
            logger.warning("Re-ranking requested but no re-ranker is configured")

        return preview

    async def _match_one(self, product: ExtractedProduct) -> PreviewItem:
        try:
            query_text = self.query_builder.build_query_text(product)
            filters = self.query_builder.build_filters(product)
            candidates = await self.retriever.retrieve(query_text, filters)
            matches = self.score_adjuster.adjust(product, candidates)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Matching failed for {product.normalized_name}: {e}")
            return PreviewItem(extracted_product=product, matches=[], error=str(e) or e.__class__.__name__)

        return PreviewItem(extracted_product=product, matches=matches)
