"""Request and response envelopes for the catalog processing endpoints."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .products import CandidateMatch, CatalogProductRow, ExtractedProduct, PreviewItem


class PipelineData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    products_processed: int = Field(alias="productsProcessed")
    preview: List[PreviewItem] = Field(default_factory=list)


class PipelineMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    processing_time_ms: float = Field(alias="processingTimeMs")
    wholesaler_tag: str = Field(alias="wholesalerTag")
    company: Optional[str] = None
    reranked: bool = False


class PipelineResponse(BaseModel):
    """Envelope returned by a full image-to-preview pipeline run."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: PipelineData
    metadata: PipelineMetadata


class ExtractionMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_products_found: int = Field(alias="totalProductsFound")
    processing_time_ms: float = Field(alias="processingTimeMs")
    company: Optional[str] = None
    model: str


class ExtractionResponse(BaseModel):
    success: bool = True
    data: List[ExtractedProduct]
    metadata: ExtractionMetadata


class SearchSimilarRequest(BaseModel):
    """Free-text similarity search against the catalog."""

    text: str = Field(min_length=1)
    limit: int = Field(default=5, ge=1, le=50)
    score_threshold: Optional[float] = Field(default=None, ge=0, le=1)
    filters: Dict[str, Any] = Field(default_factory=dict)


class SearchSimilarResponse(BaseModel):
    success: bool = True
    results: List[CandidateMatch]


class IngestionRequest(BaseModel):
    products: List[CatalogProductRow] = Field(min_length=1)


class IngestionResponse(BaseModel):
    success: bool = True
    processed: int
    total: int
    message: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str
