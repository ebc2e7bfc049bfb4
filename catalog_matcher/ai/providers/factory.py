"""AI provider factory for creating provider instances."""

import logging
from typing import Optional

from ...config import PROVIDER_TYPE, AISettings
from .base import BaseProvider
from .google import GoogleAIProvider
from .groq import GroqProvider


def create_provider(
    ai_settings: AISettings,
    provider_type: Optional[PROVIDER_TYPE] = None,
    model: Optional[str] = None,
) -> BaseProvider:
    """Create a provider instance based on the specified type.

    Args:
        ai_settings: AI settings group carrying the API keys
        provider_type: The type of provider to create. Defaults to Google.
        model: The default model to use for the provider.
               If None, uses the provider's default model.

    Returns:
        An instance of the specified provider type

    Raises:
        ValueError: If the specified provider type is not supported
    """
    logger = logging.getLogger(__name__)

    provider_type = provider_type or PROVIDER_TYPE.GOOGLE
    logger.debug(f"Creating provider: {provider_type} (model={model})")

    if provider_type == PROVIDER_TYPE.GOOGLE:
        return GoogleAIProvider(ai_settings, default_model=model)
    elif provider_type == PROVIDER_TYPE.GROQ:
        return GroqProvider(api_key=ai_settings.groq_api_key.get_secret_value(), default_model=model)

    raise ValueError(f"Unsupported provider type: {provider_type}")
