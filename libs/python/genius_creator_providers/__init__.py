"""Unified provider abstraction for Gemini and ChatGPT text and image generation."""

from .base import (
    ImageRequest,
    ImageResponse,
    LLMProvider,
    ProviderCapabilities,
    ProviderRequest,
    ProviderResponse,
)
from .config import ProviderConfig, ProviderSettings, load_provider_config
from .exceptions import (
    ProviderCapabilityError,
    ProviderConfigError,
    ProviderError,
    ProviderResponseError,
)
from .factory import PROVIDER_REGISTRY, create_provider
from .mock import MockProvider

__all__ = [
    "ImageRequest",
    "ImageResponse",
    "LLMProvider",
    "ProviderCapabilities",
    "ProviderRequest",
    "ProviderResponse",
    "ProviderConfig",
    "ProviderSettings",
    "load_provider_config",
    "ProviderCapabilityError",
    "ProviderConfigError",
    "ProviderError",
    "ProviderResponseError",
    "PROVIDER_REGISTRY",
    "create_provider",
    "MockProvider",
]
