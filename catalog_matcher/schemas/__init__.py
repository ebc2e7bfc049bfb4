from .pipeline import (
    ExtractionMetadata,
    ExtractionResponse,
    IngestionRequest,
    IngestionResponse,
    MessageResponse,
    PipelineData,
    PipelineMetadata,
    PipelineResponse,
    SearchSimilarRequest,
    SearchSimilarResponse,
)
from .products import (
    CandidateMatch,
    CatalogPayload,
    CatalogProductRow,
    ExtractedProduct,
    NormalizedFilterSet,
    PreviewItem,
    ProductVectorRecord,
)

__all__ = [
    "CandidateMatch",
    "CatalogPayload",
    "CatalogProductRow",
    "ExtractedProduct",
    "ExtractionMetadata",
    "ExtractionResponse",
    "IngestionRequest",
    "IngestionResponse",
    "MessageResponse",
    "NormalizedFilterSet",
    "PipelineData",
    "PipelineMetadata",
    "PipelineResponse",
    "PreviewItem",
    "ProductVectorRecord",
    "SearchSimilarRequest",
    "SearchSimilarResponse",
]
