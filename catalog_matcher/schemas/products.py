"""Schemas for extracted products, catalog records and match candidates.

Field names are English; the aliases keep the catalog vocabulary used by the
extraction prompt, the stored catalog payloads and the preview payload.
"""

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)

DEFAULT_EXTRACTION_CONFIDENCE = 0.95
DEFAULT_PROVENANCE = "multimodal_analysis"

# Decimal in memory, plain number on the wire
Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# Payload key -> exact value, all conditions must hold
NormalizedFilterSet = Dict[str, Any]


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class ExtractedProduct(BaseModel):
    """One product read off a catalog image."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    normalized_name: str = Field(
        min_length=1, validation_alias=AliasChoices("normalized_name", "producto_normalizado")
    )
    product_subtype: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("product_subtype", "tipo_producto")
    )
    # Literal price printed on the image, never derived
    catalog_price: Price = Field(
        ge=0,
        validation_alias=AliasChoices("catalog_price", "precio_final_catalogo", "precio_final_con_descuento"),
    )
    discount_percent: Optional[Decimal] = Field(
        default=None, validation_alias=AliasChoices("discount_percent", "porcentaje_descuento")
    )
    brand: Optional[str] = Field(default=None, validation_alias=AliasChoices("brand", "marca"))
    pack_count: int = Field(default=1, ge=1, validation_alias=AliasChoices("pack_count", "cantidad_pack"))
    unit_of_measure: str = Field(default="", validation_alias=AliasChoices("unit_of_measure", "unidad_medida"))
    quantity_description: str = Field(
        default="", validation_alias=AliasChoices("quantity_description", "descripcion_cantidad")
    )
    inferred_category: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("inferred_category", "categoria_inferida")
    )
    unit_count: Optional[int] = Field(default=None, ge=0, validation_alias=AliasChoices("unit_count", "unidad_count"))
    confidence: float = Field(default=DEFAULT_EXTRACTION_CONFIDENCE, ge=0, le=1)
    extraction_provenance: str = Field(
        default=DEFAULT_PROVENANCE, validation_alias=AliasChoices("extraction_provenance", "rawText")
    )
    wholesaler: Optional[str] = Field(default=None, validation_alias=AliasChoices("wholesaler", "mayorista"))

    @field_validator("normalized_name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("product_subtype", "brand", "inferred_category", "wholesaler", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("unit_count", mode="before")
    @classmethod
    def _optional_number(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("discount_percent", mode="before")
    @classmethod
    def _lenient_discount(cls, value: Any) -> Any:
        # Printed as "15%" or "15,5 %"; anything unreadable is dropped, not the product
        value = _blank_to_none(value)
        if value is None or isinstance(value, bool):
            return None
        try:
            discount = Decimal(str(value).replace("%", "").replace(",", ".").strip())
        except InvalidOperation:
            return None
        return discount if discount.is_finite() else None

    @field_validator("pack_count", mode="before")
    @classmethod
    def _default_pack_count(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        return 1 if value is None else value

    @field_validator("unit_of_measure", "quantity_description", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value).strip()


class CatalogPayload(BaseModel):
    """Payload stored next to each catalog vector."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    code: Optional[Union[int, str]] = Field(default=None, validation_alias=AliasChoices("code", "codigo"))
    category: Optional[str] = Field(default=None, validation_alias=AliasChoices("category", "rubro"))
    brand: Optional[str] = Field(default=None, validation_alias=AliasChoices("brand", "marca"))
    description: Optional[str] = Field(default=None, validation_alias=AliasChoices("description", "descripcion"))
    normalized_weight: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("normalized_weight", "peso")
    )
    unit_count: Optional[int] = None
    price: Optional[float] = Field(default=None, validation_alias=AliasChoices("price", "precio"))
    embedding_text: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("embedding_text", "texto_para_embedding")
    )


class CandidateMatch(BaseModel):
    """A catalog product surfaced by the vector index for one extracted product."""

    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str]
    score: float
    payload: CatalogPayload = Field(default_factory=CatalogPayload)
    # Raw score plus brand boost; may exceed 1.0
    adjusted_score: Optional[float] = Field(default=None, alias="score_ajustado")


class PreviewItem(BaseModel):
    """An extracted product with its (possibly empty) candidate list."""

    model_config = ConfigDict(populate_by_name=True)

    extracted_product: ExtractedProduct = Field(alias="producto_extraido")
    matches: List[CandidateMatch] = Field(default_factory=list, alias="coincidencias")
    total_matches: int = Field(default=0, alias="total_coincidencias")
    error: Optional[str] = None
    llm_error: Optional[str] = Field(default=None, alias="error_llm")

    @model_validator(mode="after")
    def _sync_total(self) -> "PreviewItem":
        self.total_matches = len(self.matches)
        return self

    def with_matches(self, matches: List[CandidateMatch], **updates: Any) -> "PreviewItem":
        """Return a copy carrying ``matches`` and a consistent count."""
        return self.model_copy(update={"matches": list(matches), "total_matches": len(matches), **updates})


class ProductVectorRecord(BaseModel):
    """One catalog product as stored in the vector index."""

    id: int = Field(ge=0)
    vector: List[float]
    payload: CatalogPayload


class CatalogProductRow(BaseModel):
    """One known product to load into the vector index."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: Union[int, str] = Field(validation_alias=AliasChoices("code", "codigo"))
    category: str = Field(default="", validation_alias=AliasChoices("category", "rubro"))
    brand: str = Field(default="", validation_alias=AliasChoices("brand", "marca"))
    description: str = Field(validation_alias=AliasChoices("description", "descripcion"))
    unit: str = Field(default="", validation_alias=AliasChoices("unit", "peso"))
    unit_count: Optional[int] = Field(default=None, validation_alias=AliasChoices("unit_count", "unidad_count"))
    price: Optional[float] = Field(default=None, validation_alias=AliasChoices("price", "precio"))

    @field_validator("category", "brand", "unit", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value).strip()
