"""Groq AI provider implementation."""

import logging
from typing import List, Optional

import groq
from groq import AsyncGroq
from groq.types.chat import ChatCompletion

from ...utils.errors import ConfigurationError, ProviderError, RateLimitError
from .base import BaseProvider


class GroqProvider(BaseProvider):
    """Groq AI implementation, used as an alternative text backend for re-ranking."""

    def __init__(self, api_key: str, default_model: Optional[str] = None):
        """Initialize the Groq provider.

        Args:
            api_key: Groq API key
            default_model: The default model to use for text generation.
        """
        super().__init__(default_model=default_model or "llama-3.1-8b-instant")
        self._api_key = api_key
        self.client = AsyncGroq(api_key=api_key) if api_key else None
        self.logger = logging.getLogger(__name__)
        self.provider = "groq"

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def generate_text(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Generate text from the model."""
        if self.client is None:
            raise ConfigurationError("Groq provider not configured", details={"provider": self.provider})

        try:
            response: ChatCompletion = await self.client.chat.completions.create(
                model=self._default_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except groq.RateLimitError as e:
            retry_after = float(e.response.headers.get("retry-after", "60"))
            raise RateLimitError(self.provider, retry_after=retry_after)
        except groq.APIStatusError as e:
            raise ProviderError(f"Groq HTTP error {e.status_code}: {e.message}", status_code=502) from e
        except groq.APIError as e:
            raise ProviderError(f"Groq error: {str(e)}") from e

        if not response.choices or not response.choices[0].message.content:
            raise ProviderError("Empty response from model")

        return response.choices[0].message.content

    async def get_embeddings(self, texts: List[str], task_type: Optional[str] = None) -> List[List[float]]:
        """Groq does not serve embeddings."""
        raise ProviderError("Groq does not support embeddings")

    def get_dimensions(self) -> int:
        raise ProviderError("Groq does not support embeddings")
