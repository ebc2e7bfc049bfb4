"""Base classes for AI providers."""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ...utils.errors import ProviderError, ResponseParseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```(?:json|JSON)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)
_FENCE_MARKER_RE = re.compile(r"```(?:json|JSON)?")
_ARRAY_SPAN_RE = re.compile(r"\[[\s\S]*\]")
_OBJECT_SPAN_RE = re.compile(r"\{[\s\S]*\}")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _embedded_json(text: str) -> Optional[Any]:
    """Find a JSON array or object inside chatty text, ignoring fence markers."""
    unfenced = _FENCE_MARKER_RE.sub("", text)
    spans = [match for match in (_ARRAY_SPAN_RE.search(unfenced), _OBJECT_SPAN_RE.search(unfenced)) if match]
    # The outermost value opens first
    for match in sorted(spans, key=lambda m: m.start()):
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            continue
    return None


def parse_json_text(text: str) -> Any:
    """Parse a model response as JSON.

    Accepts a bare JSON document or one wrapped in a fenced code block. When
    the model adds prose around the payload, the outermost array (or object)
    span is parsed instead.

    Raises:
        ResponseParseError: If the text is empty or holds no valid JSON
    """
    if not text or not text.strip():
        raise ResponseParseError("Empty response from model")
    cleaned = strip_code_fence(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        embedded = _embedded_json(cleaned)
        if embedded is None:
            raise ResponseParseError(f"Invalid JSON response: {e}", raw_preview=cleaned)
        logger.debug("Parsed JSON embedded in surrounding text")
        return embedded


class BaseProvider(ABC):
    """Base class for AI providers."""

    def __init__(self, default_model: Optional[str] = None):
        """Initialize the provider.

        Args:
            default_model: The default model to use for text generation.
        """
        self.logger = logging.getLogger(__name__)
        self._default_model = default_model
        self.provider = "base"

    @property
    def default_model(self) -> Optional[str]:
        """Get the default model for this provider."""
        return self._default_model

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the provider has the credentials it needs."""
        pass

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        temperature: float = 1.0,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Generate text from the model.

        Args:
            prompt: The input prompt
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            Generated text

        Raises:
            ConfigurationError: If the provider has no API key
            ProviderError: If generation fails
            RateLimitError: If rate limit is exceeded
        """
        pass

    async def generate_from_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        temperature: float = 0.1,
    ) -> str:
        """Generate text from an image plus an instruction.

        Raises:
            ProviderError: If the provider has no multimodal support
        """
        raise ProviderError(f"Provider {self.provider} does not support image input")

    @abstractmethod
    async def get_embeddings(self, texts: List[str], task_type: Optional[str] = None) -> List[List[float]]:
        """Get embeddings for a list of texts.

        Args:
            texts: Texts to embed
            task_type: Provider-specific hint (e.g. query vs document)

        Returns:
            One vector per text, in input order

        Raises:
            ConfigurationError: If the provider has no API key
            ProviderError: If embeddings generation fails
            RateLimitError: If rate limit is exceeded
        """
        pass

    @abstractmethod
    def get_dimensions(self) -> int:
        """Get the dimensionality of the embeddings vectors."""
        pass
