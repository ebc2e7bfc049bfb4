"""Catalog processing endpoints: extraction, full matching pipeline, search and ingestion."""

import logging
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..container import Services, get_services
from ..schemas.pipeline import (
    ExtractionMetadata,
    ExtractionResponse,
    IngestionRequest,
    IngestionResponse,
    MessageResponse,
    PipelineResponse,
    SearchSimilarRequest,
    SearchSimilarResponse,
)
from ..security import verify_security_api_key
from ..utils.errors import InvalidRequestError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/catalog-processing",
    tags=["Catalog processing"],
    dependencies=[Depends(verify_security_api_key)],
)


async def _read_image(image: UploadFile) -> bytes:
    if image.content_type and not image.content_type.startswith("image/"):
        raise InvalidRequestError(
            f"Unsupported file type {image.content_type}, expected an image",
            details={"filename": image.filename},
        )
    data = await image.read()
    if not data:
        raise InvalidRequestError("Uploaded image is empty", details={"filename": image.filename})
    return data


@router.post("/process-image", response_model=ExtractionResponse)
async def process_image(
    image: UploadFile = File(...),
    company: Optional[str] = Form(None),
    services: Services = Depends(get_services),
):
    """Extract products and prices from a catalog image without matching them."""
    start = time.perf_counter()
    data = await _read_image(image)
    products = await services.extractor.extract(data, mime_type=image.content_type or "image/jpeg", company=company)
    return ExtractionResponse(
        data=products,
        metadata=ExtractionMetadata(
            total_products_found=len(products),
            processing_time_ms=round((time.perf_counter() - start) * 1000, 2),
            company=company,
            model=services.extractor.model_name,
        ),
    )


@router.post("/process-image-preview", response_model=PipelineResponse)
async def process_image_preview(
    image: UploadFile = File(...),
    company: Optional[str] = Form(None),
    rerank: Optional[bool] = Form(None),
    services: Services = Depends(get_services),
):
    """Run the full pipeline and return every extracted product with its catalog candidates."""
    data = await _read_image(image)
    logger.debug(f"Preview requested for {image.filename} ({len(data)} bytes, company={company}, rerank={rerank})")
    return await services.pipeline.process(
        data,
        filename=image.filename,
        mime_type=image.content_type or "image/jpeg",
        company=company,
        rerank=rerank,
    )


@router.post("/search-similar", response_model=SearchSimilarResponse)
async def search_similar(request: SearchSimilarRequest, services: Services = Depends(get_services)):
    """Free-text similarity search against the catalog."""
    results = await services.retriever.retrieve(
        request.text,
        filters=request.filters,
        limit=request.limit,
        score_threshold=request.score_threshold,
    )
    return SearchSimilarResponse(results=results)


@router.post("/catalog-products", response_model=IngestionResponse)
async def load_catalog_products(request: IngestionRequest, services: Services = Depends(get_services)):
    """Embed and store known catalog products."""
    processed = await services.ingestion.ingest(request.products)
    return IngestionResponse(
        processed=processed,
        total=len(request.products),
        message=f"Loaded {processed} of {len(request.products)} products",
    )


@router.post("/recreate-collection", response_model=MessageResponse)
async def recreate_collection(services: Services = Depends(get_services)):
    """Drop every stored product and recreate the empty collection."""
    await services.index.clear_collection()
    return MessageResponse(message=f"Collection {services.index.collection_name} recreated")


@router.get("/collection")
async def get_collection(services: Services = Depends(get_services)) -> Dict[str, Any]:
    """Raw description of the catalog collection."""
    info = await services.index.get_collection_info()
    return {"success": True, "collection": services.index.collection_name, "exists": info is not None, "info": info}
