"""Core interfaces and dataclasses for provider interactions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, MutableMapping

from .exceptions import ProviderCapabilityError


@dataclass(slots=True)
class ProviderRequest:
    """Normalized text request passed to providers."""

    prompt: str
    system_prompt: str | None = None
    json_schema: Mapping[str, Any] | None = None
    temperature: float | None = None
    max_output_tokens: int | None = None
    top_p: float | None = None
    reasoning_effort: str | None = None
    verbosity: str | None = None
    thinking_budget: int | None = None
    include_thoughts: bool | None = None
    metadata: MutableMapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ProviderResponse:
    """Standard text response returned by providers."""

    text: str
    raw: Any
    model: str
    prompt_tokens: int
    completion_tokens: int
    cost_usd: float | None = None
    latency_ms: float | None = None
    received_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(slots=True)
class ImageRequest:
    """Normalized image request passed to providers."""

    prompt: str
    aspect_ratio: str = "3:4"
    image_size: str = "1K"
    metadata: MutableMapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ImageResponse:
    """Binary image payload returned by providers."""

    data: bytes
    mime_type: str
    raw: Any
    model: str
    cost_usd: float | None = None
    latency_ms: float | None = None
    received_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(slots=True)
class ProviderCapabilities:
    """Capability flags used when choosing a provider."""

    supports_json_mode: bool = False
    supports_images: bool = False
    max_input_tokens: int | None = None
    max_output_tokens: int | None = None
    supports_reasoning_effort: bool = False
    supports_verbosity: bool = False
    supports_thinking: bool = False


class LLMProvider(ABC):
    """Abstract base class implemented by concrete providers."""

    name: str

    @abstractmethod
    def capabilities(self) -> ProviderCapabilities:
        """Return capability metadata."""

    @abstractmethod
    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        """Generate text or JSON response for the provided prompt."""

    async def generate_image(self, request: ImageRequest) -> ImageResponse:
        """Render an image for the prompt; text-only providers refuse."""

        raise ProviderCapabilityError(f"Provider {self.name} does not support image generation")
