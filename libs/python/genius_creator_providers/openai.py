"""OpenAI ChatGPT provider implementation."""

from __future__ import annotations

import base64
import binascii
import time
from typing import Any, Dict, List

from openai import AsyncOpenAI

from .base import (
    ImageRequest,
    ImageResponse,
    LLMProvider,
    ProviderCapabilities,
    ProviderRequest,
    ProviderResponse,
)
from .config import DEFAULT_IMAGE_MODELS, ProviderConfig
from .exceptions import ProviderResponseError
from .pricing import estimate_cost, estimate_image_cost

# Closest portrait sizes offered by the images endpoint.
_IMAGE_SIZES = {
    "3:4": "1024x1536",
    "2:3": "1024x1536",
    "1:1": "1024x1024",
    "4:3": "1536x1024",
}


class OpenAIProvider(LLMProvider):
    name = "openai"

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        self._client = AsyncOpenAI(api_key=config.api_key)

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_json_mode=True,
            supports_images=True,
            max_input_tokens=None,
            max_output_tokens=self._config.settings.max_output_tokens,
            supports_reasoning_effort=True,
            supports_verbosity=True,
        )

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        messages: List[Dict[str, Any]] = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.prompt})

        temperature = (
            request.temperature
            if request.temperature is not None
            else self._config.settings.temperature
        )

        params: Dict[str, Any] = {
            "model": self._config.model,
            "messages": messages,
            "temperature": temperature,
        }

        if request.top_p is not None:
            params["top_p"] = request.top_p
        elif self._config.settings.top_p is not None:
            params["top_p"] = self._config.settings.top_p

        max_output = (
            request.max_output_tokens
            if request.max_output_tokens is not None
            else self._config.settings.max_output_tokens
        )
        if max_output:
            params["max_completion_tokens"] = max_output

        if request.json_schema:
            params["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": "structured", "schema": dict(request.json_schema)},
            }
        elif self._config.settings.json_mode:
            params["response_format"] = {"type": "json_object"}

        reasoning_effort = (
            request.reasoning_effort
            if request.reasoning_effort is not None
            else self._config.settings.reasoning_effort
        )
        if reasoning_effort:
            params["reasoning_effort"] = reasoning_effort

        verbosity = (
            request.verbosity
            if request.verbosity is not None
            else self._config.settings.verbosity
        )
        if verbosity:
            params["verbosity"] = verbosity

        start = time.perf_counter()
        response = await self._client.chat.completions.create(**params)
        latency_ms = (time.perf_counter() - start) * 1000

        try:
            choice = response.choices[0].message
            text = choice.content or ""
        except (IndexError, AttributeError) as err:
            raise ProviderResponseError("OpenAI response missing content") from err

        usage = getattr(response, "usage", None)
        prompt_tokens = getattr(usage, "prompt_tokens", 0) if usage else 0
        completion_tokens = getattr(usage, "completion_tokens", 0) if usage else 0
        cost_usd = estimate_cost(
            provider=self._config.name,
            model=response.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )

        return ProviderResponse(
            text=text,
            raw=response,
            model=response.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost_usd=cost_usd,
            latency_ms=latency_ms,
        )

    async def generate_image(self, request: ImageRequest) -> ImageResponse:
        model = self._config.image_model or DEFAULT_IMAGE_MODELS["openai"]
        params: Dict[str, Any] = {
            "model": model,
            "prompt": request.prompt,
            "size": _IMAGE_SIZES.get(request.aspect_ratio, "1024x1536"),
            "n": 1,
        }
        # dall-e models return URLs unless asked for base64.
        if model.startswith("dall-e"):
            params["response_format"] = "b64_json"
            params["size"] = "1024x1792"

        start = time.perf_counter()
        response = await self._client.images.generate(**params)
        latency_ms = (time.perf_counter() - start) * 1000

        try:
            encoded = response.data[0].b64_json
        except (IndexError, AttributeError, TypeError) as err:
            raise ProviderResponseError("OpenAI image response missing data") from err
        if not encoded:
            raise ProviderResponseError("OpenAI image response missing base64 payload")
        try:
            data = base64.b64decode(encoded)
        except (binascii.Error, ValueError) as err:
            raise ProviderResponseError("OpenAI image payload is not valid base64") from err

        return ImageResponse(
            data=data,
            mime_type="image/png",
            raw=response,
            model=model,
            cost_usd=estimate_image_cost(self._config.name, model),
            latency_ms=latency_ms,
        )
