"""Google Gemini provider implementation."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict

from google import genai

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


class GeminiProvider(LLMProvider):
    name = "gemini"

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        self._client = genai.Client(api_key=config.api_key)

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_json_mode=True,
            supports_images=True,
            max_input_tokens=None,
            max_output_tokens=self._config.settings.max_output_tokens,
            supports_thinking=True,
        )

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        temperature = (
            request.temperature
            if request.temperature is not None
            else self._config.settings.temperature
        )

        generation_config: Dict[str, Any] = {"temperature": temperature}
        if request.system_prompt:
            generation_config["system_instruction"] = request.system_prompt

        if request.top_p is not None:
            generation_config["top_p"] = request.top_p
        elif self._config.settings.top_p is not None:
            generation_config["top_p"] = self._config.settings.top_p

        max_output = (
            request.max_output_tokens
            if request.max_output_tokens is not None
            else self._config.settings.max_output_tokens
        )
        if max_output:
            generation_config["max_output_tokens"] = max_output

        if request.json_schema:
            generation_config["response_mime_type"] = "application/json"
            generation_config["response_schema"] = dict(request.json_schema)

        thinking_budget = (
            request.thinking_budget
            if request.thinking_budget is not None
            else self._config.settings.thinking_budget
        )
        include_thoughts = (
            request.include_thoughts
            if request.include_thoughts is not None
            else self._config.settings.include_thoughts
        )

        thinking_config: Dict[str, Any] = {}
        if thinking_budget is not None:
            thinking_config["thinking_budget"] = thinking_budget
        if include_thoughts:
            thinking_config["include_thoughts"] = True
        if thinking_config:
            generation_config["thinking_config"] = thinking_config

        start = time.perf_counter()
        # generate_content blocks; run in a thread to keep the event loop free.
        response = await asyncio.to_thread(
            self._client.models.generate_content,
            model=self._config.model,
            contents=request.prompt,
            config=generation_config,
        )
        latency_ms = (time.perf_counter() - start) * 1000

        try:
            text = response.text or ""
        except (AttributeError, ValueError) as err:
            raise ProviderResponseError("Gemini response missing text content") from err

        usage = getattr(response, "usage_metadata", None)
        prompt_tokens = (getattr(usage, "prompt_token_count", 0) or 0) if usage else 0
        completion_tokens = (getattr(usage, "candidates_token_count", 0) or 0) if usage else 0
        cost_usd = estimate_cost(
            provider=self._config.name,
            model=self._config.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )

        return ProviderResponse(
            text=text,
            raw=response,
            model=self._config.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost_usd=cost_usd,
            latency_ms=latency_ms,
        )

    async def generate_image(self, request: ImageRequest) -> ImageResponse:
        model = self._config.image_model or DEFAULT_IMAGE_MODELS["gemini"]
        image_config = {
            "image_config": {
                "aspect_ratio": request.aspect_ratio,
                "image_size": request.image_size,
            }
        }

        start = time.perf_counter()
        response = await asyncio.to_thread(
            self._client.models.generate_content,
            model=model,
            contents=request.prompt,
            config=image_config,
        )
        latency_ms = (time.perf_counter() - start) * 1000

        candidates = getattr(response, "candidates", None) or []
        content = getattr(candidates[0], "content", None) if candidates else None
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return ImageResponse(
                    data=inline.data,
                    mime_type=inline.mime_type or "image/png",
                    raw=response,
                    model=model,
                    cost_usd=estimate_image_cost(self._config.name, model),
                    latency_ms=latency_ms,
                )
        raise ProviderResponseError("Gemini response did not include inline image data")
