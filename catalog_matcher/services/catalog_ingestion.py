"""Bulk loading of known catalog products into the vector index."""

import hashlib
import logging
from typing import List, Optional

from tqdm import tqdm

from ..schemas.products import CatalogPayload, CatalogProductRow, ProductVectorRecord
from . import units
from .embeddings import DOCUMENT_TASK, EmbeddingService
from .vector_index import QdrantIndex

logger = logging.getLogger(__name__)

# Keeps hashed ids inside Qdrant's unsigned 64-bit range
_HASH_ID_BYTES = 7


def product_point_id(code) -> int:
    """Numeric product codes are used as-is; anything else gets a stable hash."""
    text = str(code).strip()
    if text.isdigit():
        return int(text)
    logger.debug(f"Non-numeric product code {code!r}, using hashed id")
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:_HASH_ID_BYTES], "big")


def build_embedding_text(row: CatalogProductRow, brand: str, normalized_unit: str) -> str:
    """``code; category; brand; description; unit; price``."""
    price = "" if row.price is None else str(row.price)
    return "; ".join([str(row.code), row.category, brand, row.description, normalized_unit, price])


def build_payload(row: CatalogProductRow) -> CatalogPayload:
    brand = row.brand.upper().strip()
    normalized_unit = units.normalize(row.unit)
    return CatalogPayload(
        code=row.code,
        category=row.category or None,
        brand=brand or None,
        description=row.description,
        normalized_weight=normalized_unit or None,
        unit_count=row.unit_count,
        price=row.price,
        embedding_text=build_embedding_text(row, brand, normalized_unit),
    )


class CatalogIngestionService:
    """Embeds catalog rows and upserts them in batches."""

    def __init__(self, embeddings: EmbeddingService, index: QdrantIndex, batch_size: int = 100):
        self.embeddings = embeddings
        self.index = index
        self.batch_size = max(1, batch_size)

    async def ingest(self, rows: List[CatalogProductRow], show_progress: Optional[bool] = None) -> int:
        """Embed and store ``rows``; returns the number of points written.

        Raises:
            ConfigurationError: If the embedding provider is not configured
            ProviderError: If embedding fails after retries
            UpstreamError: If the vector index rejects or cannot receive a batch
        """
        if not rows:
            return 0

        batches = [rows[i : i + self.batch_size] for i in range(0, len(rows), self.batch_size)]
        progress = tqdm(total=len(rows), desc="Ingesting catalog products", disable=not show_progress)
        processed = 0
        try:
            for batch in batches:
                payloads = [build_payload(row) for row in batch]
                vectors = await self.embeddings.embed(
                    [payload.embedding_text for payload in payloads], task_type=DOCUMENT_TASK
                )
                records = [
                    ProductVectorRecord(id=product_point_id(row.code), vector=vector, payload=payload)
                    for row, vector, payload in zip(batch, vectors, payloads)
                ]
                processed += await self.index.upsert(records)
                progress.update(len(batch))
        finally:
            progress.close()

        logger.info(f"Ingested {processed}/{len(rows)} catalog products into {self.index.collection_name}")
        return processed
