"""Query text and exact-filter construction for one extracted product."""

import logging
import re

from ..config import MatchingSettings
from ..schemas.products import ExtractedProduct, NormalizedFilterSet
from . import units

logger = logging.getLogger(__name__)

# Extraction sometimes yields a bare "kg" for items sold "x kg."
_PER_KILO_MARKER = "xkg."


class QueryBuilder:
    """Builds the embedding text and the structured pre-filters for a product."""

    def __init__(self, matching: MatchingSettings):
        self.brand_filter_enabled = matching.brand_filter_enabled
        self.brand_filter_min_confidence = matching.brand_filter_min_confidence

    def build_query_text(self, product: ExtractedProduct) -> str:
        """Category, brand, name and unit count, in that order."""
        parts = [product.inferred_category, product.brand, product.normalized_name]
        if product.unit_count is not None:
            parts.append(str(product.unit_count))

        query_text = " ".join(part for part in parts if part)
        query_text = re.sub(r"\s+", " ", query_text).strip()
        logger.debug(f"Query text for embedding: {query_text}")
        return query_text

    def build_filters(self, product: ExtractedProduct) -> NormalizedFilterSet:
        """Exact-match filters; the first applicable rule wins."""
        if product.pack_count > 1:
            filters: NormalizedFilterSet = {"unit_count": product.pack_count}
            if (
                self.brand_filter_enabled
                and product.brand
                and product.confidence >= self.brand_filter_min_confidence
            ):
                filters["brand"] = product.brand.upper().strip()
            return filters

        if units.is_count_unit(product.unit_of_measure):
            return {}

        normalized_unit = units.normalize(product.unit_of_measure)
        if normalized_unit == "KG" and _PER_KILO_MARKER in product.normalized_name.lower():
            normalized_unit = "1KG"

        if not normalized_unit:
            logger.debug(f"No measure filter for unit '{product.unit_of_measure}' of {product.normalized_name}")
            return {}

        return {"normalized_weight": normalized_unit}
