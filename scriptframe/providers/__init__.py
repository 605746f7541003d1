"""
Provider adapters for scriptframe.

This package provides:
1. Gemini prompt generation and reference style analysis
2. Image generation with Imagen (through Gemini) or Stability AI
3. Explicit, non-fatal initialization of both provider families
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

import aiohttp
from google import genai

from ..config import Config, GeminiConfig, StabilityConfig
from ..errors import ConfigurationError
from ..models import ImageGenerator
from ..utils.logger import get_logger
from .gemini import GeminiService
from .safety import is_safety_block
from .stability import StabilityImageGenerator, build_form_fields

logger = get_logger(__name__)


class ImageProvider(str, Enum):
    """Image backends a caller can choose between."""

    IMAGEN = "imagen"
    STABILITY = "stability"


def create_gemini_service(
    config: Optional[GeminiConfig] = None,
    client: Optional[genai.Client] = None,
) -> GeminiService:
    """
    Factory function to create the Gemini service.

    Args:
        config: Optional GeminiConfig. If None, uses default config.
        client: Optional pre-built client, e.g. a fake in tests.

    Raises:
        ConfigurationError: If no client is given and no API key is configured
    """
    if config is None:
        from ..config import get_config

        config = get_config().gemini

    return GeminiService(config, client=client)


def create_stability_generator(
    config: Optional[StabilityConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> StabilityImageGenerator:
    """Factory function to create the Stability AI generator."""
    if config is None:
        from ..config import get_config

        config = get_config().stability

    return StabilityImageGenerator(config, session=session)


@dataclass
class ProviderRegistry:
    """Initialized adapters, with the reasons any of them is disabled."""

    gemini: Optional[GeminiService]
    stability: StabilityImageGenerator
    default_image_provider: ImageProvider = ImageProvider.IMAGEN
    errors: List[str] = field(default_factory=list)

    def image_generator(
        self, provider: Optional[Union[ImageProvider, str]] = None
    ) -> ImageGenerator:
        """Adapter for the selected backend (the configured default when None)."""
        try:
            selected = ImageProvider(provider) if provider else self.default_image_provider
        except ValueError as e:
            raise ConfigurationError(f"Unknown image provider: {provider}") from e

        if selected is ImageProvider.STABILITY:
            return self.stability

        if self.gemini is None:
            raise ConfigurationError(
                "Imagen is unavailable because the Gemini provider is not configured"
            )
        return self.gemini


def initialize_providers(config: Optional[Config] = None) -> ProviderRegistry:
    """
    Build every adapter the configuration allows.

    Invalid settings raise ConfigurationError. A missing Gemini key disables
    the Gemini adapters and is recorded in ``errors``; a missing Stability
    key is reported per call instead.
    """
    if config is None:
        from ..config import get_config

        config = get_config()

    try:
        config.validate()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    default_provider = ImageProvider(config.default_image_provider)

    errors = []
    try:
        gemini = create_gemini_service(config.gemini)
    except ConfigurationError as e:
        logger.warning("Gemini provider disabled", reason=str(e))
        errors.append(str(e))
        gemini = None

    stability = create_stability_generator(config.stability)
    if not stability.is_configured:
        errors.append("Stability AI API key is not configured")

    return ProviderRegistry(
        gemini=gemini,
        stability=stability,
        default_image_provider=default_provider,
        errors=errors,
    )


__all__ = [
    "GeminiService",
    "StabilityImageGenerator",
    "ImageProvider",
    "ProviderRegistry",
    "build_form_fields",
    "create_gemini_service",
    "create_stability_generator",
    "initialize_providers",
    "is_safety_block",
]
