"""Provider lookup by configured name."""

from __future__ import annotations

from typing import Callable, Dict

from .base import LLMProvider
from .config import ProviderConfig
from .exceptions import ProviderConfigError
from .gemini import GeminiProvider
from .mock import MockProvider
from .openai import OpenAIProvider

ProviderBuilder = Callable[[ProviderConfig], LLMProvider]

PROVIDER_REGISTRY: Dict[str, ProviderBuilder] = {
    GeminiProvider.name: GeminiProvider,
    OpenAIProvider.name: OpenAIProvider,
    MockProvider.name: MockProvider,
}


def create_provider(config: ProviderConfig) -> LLMProvider:
    """Build the provider named by ``config.name`` (case-insensitive).

    Raises:
        ProviderConfigError: If no provider is registered under that name.
    """

    builder = PROVIDER_REGISTRY.get(config.name.strip().lower())
    if builder is None:
        known = ", ".join(sorted(PROVIDER_REGISTRY))
        raise ProviderConfigError(f"Unknown provider {config.name!r}; expected one of: {known}")
    return builder(config)


__all__ = ["PROVIDER_REGISTRY", "create_provider"]
