"""Stateless facade over the provider for the three generation units.

``generate_outline`` fails loudly because every later step depends on it.
``generate_chapter_body`` and ``generate_cover_image`` never raise for provider
problems; they return :class:`Degraded` results so one bad unit cannot abort
the rest of the document.
"""

from __future__ import annotations

import json
import logging
from time import perf_counter

from pydantic import ValidationError

from genius_creator_observability import (
    log_context,
    observe_provider_response,
    observe_stage_duration,
    observe_unit_outcome,
)
from genius_creator_providers import (
    ImageRequest,
    LLMProvider,
    ProviderConfig,
    ProviderError,
    ProviderRequest,
    ProviderResponse,
    ProviderResponseError,
    create_provider,
)
from genius_creator_schemas import (
    ContentType,
    CoverImage,
    Degraded,
    GenerationUnit,
    Ok,
    Outline,
    UnitResult,
)
from genius_creator_schemas.utils.validators import ensure_not_blank

from ..cache import StageCache
from ..models import ProviderOverride
from ..providers import resolve_provider_config
from .prompts import (
    CHAPTER_EMPTY_PLACEHOLDER,
    CHAPTER_ERROR_PLACEHOLDER,
    OUTLINE_SCHEMA,
    chapter_prompt,
    cover_prompt,
    outline_prompts,
)

logger = logging.getLogger(__name__)
SERVICE_NAME = "orchestrator"


class GenerationClient:
    """Outline, chapter body and cover image generation.

    Without an injected ``provider`` the provider is resolved from the
    environment (plus ``override``) on every call, so credentials configured
    after construction are picked up.
    """

    def __init__(
        self,
        override: ProviderOverride | None = None,
        *,
        provider: LLMProvider | None = None,
        provider_config: ProviderConfig | None = None,
        cache: StageCache | None = None,
    ) -> None:
        self._override = override
        self._provider = provider
        if provider is not None and provider_config is None:
            provider_config = ProviderConfig(name=provider.name, api_key="injected", model=provider.name)
        self._config = provider_config
        self._cache = cache if cache is not None else StageCache()

    def _resolve(self) -> tuple[ProviderConfig, LLMProvider]:
        if self._provider is not None and self._config is not None:
            return self._config, self._provider
        config = resolve_provider_config(self._override)
        return config, create_provider(config)

    async def generate_outline(
        self, topic: str, audience: str, tone: str, content_type: ContentType
    ) -> Outline:
        """Generate the title and ordered chapter list.

        Raises:
            ValueError: If ``topic`` or ``audience`` is blank.
            ProviderResponseError: If the response is not a valid, non-empty outline.
            ProviderError: For any other provider failure, including missing configuration.
        """

        topic = ensure_not_blank(topic, field_name="Topic")
        audience = ensure_not_blank(audience, field_name="Target audience")
        system_prompt, prompt = outline_prompts(topic, audience, tone, content_type)
        request = ProviderRequest(
            prompt=prompt,
            system_prompt=system_prompt,
            json_schema=OUTLINE_SCHEMA,
            metadata={"unit": GenerationUnit.OUTLINE.value},
        )

        unit = GenerationUnit.OUTLINE.value
        start = perf_counter()
        outcome = "success"
        with log_context(unit=unit):
            try:
                config, provider = self._resolve()
                response = await self._cache.generate(
                    config, provider, request, unit, accept=_is_valid_outline
                )
                observe_provider_response(
                    stage=unit, provider=config.name, service_name=SERVICE_NAME, response=response
                )
                outline = _parse_outline(response.text)
            except ProviderError:
                outcome = "error"
                logger.exception("Outline generation failed")
                raise
            except Exception as exc:
                outcome = "error"
                logger.exception("Outline generation failed")
                raise ProviderError("Outline generation failed") from exc
            finally:
                observe_stage_duration(
                    stage=unit,
                    duration_seconds=perf_counter() - start,
                    service_name=SERVICE_NAME,
                    status=outcome,
                )
            logger.info(
                "Outline generated",
                extra={"provider": config.name, "chapter_count": len(outline.chapters)},
            )
        return outline

    async def generate_chapter_body(
        self,
        project_title: str,
        chapter_title: str,
        chapter_description: str,
        tone: str,
        content_type: ContentType,
    ) -> UnitResult[str]:
        """Generate Markdown prose for one chapter; always returns some text."""

        request = ProviderRequest(
            prompt=chapter_prompt(project_title, chapter_title, chapter_description, tone, content_type),
            metadata={"unit": GenerationUnit.CHAPTER.value, "chapter": chapter_title},
        )

        unit = GenerationUnit.CHAPTER.value
        start = perf_counter()
        result: UnitResult[str]
        with log_context(unit=unit):
            try:
                config, provider = self._resolve()
                response = await self._cache.generate(config, provider, request, unit)
            except Exception as exc:
                logger.exception("Chapter generation failed", extra={"chapter_title": chapter_title})
                result = Degraded(CHAPTER_ERROR_PLACEHOLDER, _describe(exc))
            else:
                observe_provider_response(
                    stage=unit, provider=config.name, service_name=SERVICE_NAME, response=response
                )
                if response.text.strip():
                    result = Ok(response.text)
                else:
                    logger.warning("Chapter response was empty", extra={"chapter_title": chapter_title})
                    result = Degraded(CHAPTER_EMPTY_PLACEHOLDER, "empty response")
            _observe_unit(unit, result, perf_counter() - start)
        return result

    async def generate_cover_image(
        self, title: str, topic: str, content_type: ContentType
    ) -> UnitResult[CoverImage | None]:
        """Generate the cover; a failure yields ``Degraded(None, cause)``."""

        request = ImageRequest(
            prompt=cover_prompt(title, topic, content_type),
            metadata={"unit": GenerationUnit.COVER.value},
        )

        unit = GenerationUnit.COVER.value
        start = perf_counter()
        result: UnitResult[CoverImage | None]
        with log_context(unit=unit):
            try:
                config, provider = self._resolve()
                response = await provider.generate_image(request)
            except Exception as exc:
                logger.exception("Cover generation failed")
                result = Degraded(None, _describe(exc))
            else:
                observe_provider_response(
                    stage=unit, provider=config.name, service_name=SERVICE_NAME, response=response
                )
                if response.data:
                    result = Ok(CoverImage.from_bytes(response.data, response.mime_type))
                else:
                    logger.warning("Cover response contained no image bytes")
                    result = Degraded(None, "empty image")
            _observe_unit(unit, result, perf_counter() - start)
        return result


def _parse_outline(payload: str) -> Outline:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ProviderResponseError("Outline response was not valid JSON") from exc
    try:
        return Outline.model_validate(data)
    except ValidationError as exc:
        raise ProviderResponseError("Outline response did not match the expected schema") from exc


def _is_valid_outline(response: ProviderResponse) -> bool:
    try:
        _parse_outline(response.text)
    except ProviderResponseError:
        return False
    return True


def _observe_unit(unit: str, result: UnitResult, duration_seconds: float) -> None:
    observe_stage_duration(
        stage=unit,
        duration_seconds=duration_seconds,
        service_name=SERVICE_NAME,
        status="degraded" if result.degraded else "success",
    )
    observe_unit_outcome(unit, degraded=result.degraded, service_name=SERVICE_NAME)


def _describe(exc: BaseException) -> str:
    message = str(exc).strip()
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


__all__ = ["GenerationClient"]
