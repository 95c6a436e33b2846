"""Deterministic mock provider for tests and offline development."""

from __future__ import annotations

import base64
import json
from typing import Any

from .base import (
    ImageRequest,
    ImageResponse,
    LLMProvider,
    ProviderCapabilities,
    ProviderRequest,
    ProviderResponse,
)
from .config import ProviderConfig, ProviderSettings

DEFAULT_TEXT = "Mock response generated for testing."

MOCK_OUTLINE_CHAPTERS = (
    ("Fundamentos", "Conceitos essenciais e vocabulário do tema."),
    ("Prática guiada", "Exercícios passo a passo aplicando os fundamentos."),
    ("Próximos passos", "Como continuar evoluindo depois da leitura."),
)

# 1x1 transparent PNG.
MOCK_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class MockProvider(LLMProvider):
    name = "mock"

    def __init__(self, config: ProviderConfig | None = None) -> None:
        if config is None:
            settings = ProviderSettings(temperature=0.1, json_mode=False)
            config = ProviderConfig(
                name="mock", api_key="mock", model="mock", image_model="mock", settings=settings
            )
        self._config = config

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_json_mode=True,
            supports_images=True,
            max_input_tokens=32000,
            max_output_tokens=2000,
        )

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        payload: Any
        properties = (request.json_schema or {}).get("properties", {})
        if "chapters" in properties:
            payload = {
                "title": "Guia Essencial (mock)",
                "chapters": [
                    {"title": title, "description": description}
                    for title, description in MOCK_OUTLINE_CHAPTERS
                ],
            }
            text = json.dumps(payload, ensure_ascii=False)
        elif request.json_schema:
            payload = {"message": DEFAULT_TEXT, "echo": request.prompt[:50]}
            text = json.dumps(payload, ensure_ascii=False)
        else:
            text = f"## {DEFAULT_TEXT}\n\n{request.prompt[:80]}"
            payload = text
        return ProviderResponse(
            text=text,
            raw={"mock": True, "payload": payload},
            model="mock",
            prompt_tokens=len(request.prompt.split()),
            completion_tokens=len(text.split()),
            cost_usd=0.0,
            latency_ms=1.0,
        )

    async def generate_image(self, request: ImageRequest) -> ImageResponse:
        return ImageResponse(
            data=MOCK_PNG,
            mime_type="image/png",
            raw={"mock": True, "prompt": request.prompt[:80]},
            model="mock",
            cost_usd=0.0,
            latency_ms=1.0,
        )
