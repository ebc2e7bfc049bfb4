"""Product extraction from catalog images with a multimodal model."""

import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from ..ai.base import RetryPolicy
from ..ai.prompts.catalog_extraction import CatalogExtractionPrompt, create_catalog_extraction_prompt
from ..ai.providers.base import BaseProvider, parse_json_text
from ..schemas.products import ExtractedProduct
from ..utils.errors import ConfigurationError, ResponseParseError

logger = logging.getLogger(__name__)

# Wrapper keys some models use around the product array
_LIST_KEYS = ("products", "productos", "items")


def _product_records(data: Any) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in _LIST_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
        # A single product object
        return [data]
    return []


class CatalogExtractor:
    """Reads product and price records off one catalog photo."""

    def __init__(
        self,
        provider: BaseProvider,
        policy: Optional[RetryPolicy] = None,
        prompt: Optional[CatalogExtractionPrompt] = None,
    ):
        self.provider = provider
        self.policy = policy or RetryPolicy()
        self.prompt = prompt or create_catalog_extraction_prompt()

    @property
    def model_name(self) -> str:
        return self.provider.default_model or self.provider.provider

    async def extract(
        self,
        image: bytes,
        mime_type: str = "image/jpeg",
        company: Optional[str] = None,
    ) -> List[ExtractedProduct]:
        """Extract every priced product visible in ``image``.

        Args:
            image: Raw image bytes
            mime_type: MIME type of the image
            company: Optional wholesaler name used as a hint in the prompt

        Returns:
            Validated products; malformed records are skipped

        Raises:
            ConfigurationError: If the multimodal provider has no API key
            ProviderError: If the model keeps failing after retries
        """
        if not self.provider.is_configured:
            raise ConfigurationError("Extraction provider not configured", details={"provider": self.provider.provider})

        prompt = self.prompt.build(company)
        text = await self.policy.run(
            lambda: self.provider.generate_from_image(image, mime_type, prompt),
            description=f"{self.provider.provider} catalog extraction",
        )

        try:
            data = parse_json_text(text)
        except ResponseParseError as e:
            logger.warning(f"Could not parse extraction response: {e.message}")
            return []

        products: List[ExtractedProduct] = []
        for index, record in enumerate(_product_records(data)):
            try:
                products.append(ExtractedProduct.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping malformed product record #{index}: {e.error_count()} validation errors")

        logger.info(f"Extracted {len(products)} products from image ({len(image)} bytes)")
        return products
