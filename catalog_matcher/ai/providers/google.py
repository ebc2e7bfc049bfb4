"""Google AI provider implementation."""

import asyncio
import logging
from functools import partial
from typing import List, Optional

import google.generativeai as genai
from google.api_core import exceptions

from ...config import AISettings
from ...utils.errors import ConfigurationError, ProviderError, RateLimitError
from .base import BaseProvider


class GoogleAIProvider(BaseProvider):
    """Provider for Google's Generative AI API (Gemini text, vision and embeddings)."""

    def __init__(self, ai_settings: AISettings, default_model: Optional[str] = None):
        """Initialize the Google AI provider.

        Args:
            ai_settings: AI settings group (API key, embedding model and dimensions)
            default_model: The default model to use for generation. If None, uses the extraction model.
        """
        super().__init__(default_model=default_model or ai_settings.extraction_model)
        self._api_key = ai_settings.google_api_key.get_secret_value()
        self._embedding_model = ai_settings.embedding_model
        self._dimensions = ai_settings.embedding_dimensions
        self.provider = "google"
        self.logger = logging.getLogger(__name__)

        if self._api_key:
            genai.configure(api_key=self._api_key)
        else:
            self.logger.warning("GOOGLE_API_KEY not found, Gemini calls will fail until it is set")

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _ensure_configured(self) -> None:
        if not self.is_configured:
            raise ConfigurationError("Google AI provider not configured", details={"provider": self.provider})

    async def _generate(self, contents, temperature: float, max_tokens: Optional[int]) -> str:
        self._ensure_configured()
        generate_config = genai.types.GenerationConfig(temperature=temperature, max_output_tokens=max_tokens)
        try:
            model_instance = genai.GenerativeModel(model_name=self._default_model, generation_config=generate_config)
            response = await model_instance.generate_content_async(contents)
            text = response.text
        except exceptions.ResourceExhausted as e:
            # Google's API returns 429 as ResourceExhausted
            # Default to 60s retry if no retry info provided
            self.logger.debug(f"Gemini rate limit: {e}")
            raise RateLimitError(self.provider, retry_after=60.0)
        except Exception as e:
            raise ProviderError(f"Google error: {str(e)}") from e

        if not text:
            raise ProviderError("Empty response from model")
        return text

    async def generate_text(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Generate text from the model."""
        return await self._generate(prompt, temperature, max_tokens)

    async def generate_from_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        temperature: float = 0.1,
    ) -> str:
        """Send an inline image and an instruction to the multimodal model."""
        self.logger.debug(f"Sending {len(image)} bytes ({mime_type}) to {self._default_model}")
        contents = [{"mime_type": mime_type, "data": image}, prompt]
        return await self._generate(contents, temperature, None)

    async def get_embeddings(self, texts: List[str], task_type: Optional[str] = "retrieval_query") -> List[List[float]]:
        """Get embeddings using Google's embedding model.

        Args:
            texts: Texts to embed
            task_type: ``retrieval_query`` for search text, ``retrieval_document`` for catalog rows

        Returns:
            List of embeddings vectors, in input order
        """
        self._ensure_configured()
        if not texts:
            return []

        cleaned = [self._clean_text(text) for text in texts]
        self.logger.debug(f"Getting embeddings for {len(cleaned)} texts")

        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(
                None,
                partial(
                    genai.embed_content,
                    model=self._embedding_model,
                    content=cleaned,
                    task_type=task_type,
                    output_dimensionality=self._dimensions,
                ),
            )
        except exceptions.ResourceExhausted:
            raise RateLimitError(self.provider, retry_after=30.0)
        except Exception as e:
            raise ProviderError(f"Google embedding error: {str(e)}") from e

        if not result or "embedding" not in result:
            raise ProviderError("No embeddings returned from model")

        embeddings = [list(vector) for vector in result["embedding"]]
        if len(embeddings) != len(cleaned):
            raise ProviderError(f"Expected {len(cleaned)} embeddings, got {len(embeddings)}")
        return embeddings

    def get_dimensions(self) -> int:
        """Get the dimensionality of the embeddings vectors."""
        return self._dimensions

    def _clean_text(self, text: str) -> str:
        """Clean text before embedding.

        Args:
            text: Text to clean

        Returns:
            Cleaned text
        """
        # Remove excessive whitespace
        text = " ".join(text.split())

        # Truncate if too long (model has a token limit)
        max_chars = 3000  # Approximate limit
        if len(text) > max_chars:
            text = text[:max_chars]

        return text
