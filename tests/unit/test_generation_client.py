"""Tests for the generation client using stub providers."""

import json

import pytest

from genius_creator_providers import ProviderError, ProviderResponseError
from genius_creator_providers.mock import MOCK_PNG
from genius_creator_schemas import ContentType, CoverImage, PipelineStep

from services.orchestrator.app.cache import StageCache
from services.orchestrator.app.controller import PipelineController
from services.orchestrator.app.generation import GenerationClient
from services.orchestrator.app.generation.prompts import (
    CHAPTER_EMPTY_PLACEHOLDER,
    CHAPTER_ERROR_PLACEHOLDER,
    OUTLINE_SCHEMA,
)
from tests.utils.fakes import StaticCredentialProbe, StubProvider, make_outline, outline_json


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


def _client(provider: StubProvider, *, ttl_seconds: int = 0) -> GenerationClient:
    return GenerationClient(provider=provider, cache=StageCache(ttl_seconds=ttl_seconds, redis_url=""))


async def test_outline_preserves_provider_order() -> None:
    outline = make_outline("Solo", "Luz", "Rega")
    provider = StubProvider(on_text=lambda request: outline_json(outline))
    result = await _client(provider).generate_outline(
        "Jardinagem", "Iniciantes", "Leve", ContentType.EBOOK
    )

    assert result.title == outline.title
    assert [chapter.title for chapter in result.chapters] == ["Solo", "Luz", "Rega"]
    request = provider.requests[0]
    assert request.json_schema == OUTLINE_SCHEMA
    assert "best-sellers" in request.system_prompt
    assert "Jardinagem" in request.prompt
    assert "capítulos" in request.prompt


async def test_outline_prompt_for_course() -> None:
    provider = StubProvider(on_text=lambda request: outline_json(make_outline("Módulo 1")))
    await _client(provider).generate_outline("Python", "Analistas", "Direto", ContentType.COURSE)

    request = provider.requests[0]
    assert "cursos online" in request.system_prompt
    assert "módulos" in request.prompt


async def test_outline_rejects_blank_topic_without_calling_provider() -> None:
    provider = StubProvider()
    with pytest.raises(ValueError):
        await _client(provider).generate_outline("  ", "Iniciantes", "Leve", ContentType.EBOOK)
    assert provider.requests == []


@pytest.mark.parametrize(
    "payload",
    ["not json", json.dumps({"title": "Sem capítulos", "chapters": []}), json.dumps({"chapters": []})],
)
async def test_outline_invalid_response_raises(payload: str) -> None:
    provider = StubProvider(on_text=lambda request: payload)
    with pytest.raises(ProviderResponseError):
        await _client(provider).generate_outline("Jardinagem", "Iniciantes", "Leve", ContentType.EBOOK)


async def test_outline_wraps_unexpected_errors() -> None:
    def explode(request):
        raise RuntimeError("socket closed")

    with pytest.raises(ProviderError) as excinfo:
        await _client(StubProvider(on_text=explode)).generate_outline(
            "Jardinagem", "Iniciantes", "Leve", ContentType.EBOOK
        )
    assert isinstance(excinfo.value.__cause__, RuntimeError)


async def test_chapter_body_success() -> None:
    provider = StubProvider(on_text=lambda request: "## Solo\n\nPrepare a terra.")
    result = await _client(provider).generate_chapter_body(
        "Jardins", "Solo", "Preparar o solo", "Leve", ContentType.EBOOK
    )

    assert not result.degraded
    assert result.value.startswith("## Solo")
    prompt = provider.requests[0].prompt
    assert '"Solo"' in prompt
    assert "um e-book" in prompt


async def test_chapter_body_failure_returns_placeholder() -> None:
    def explode(request):
        raise TimeoutError("deadline exceeded")

    result = await _client(StubProvider(on_text=explode)).generate_chapter_body(
        "Jardins", "Solo", "Preparar o solo", "Leve", ContentType.COURSE
    )

    assert result.degraded
    assert result.value == CHAPTER_ERROR_PLACEHOLDER
    assert "TimeoutError" in result.cause


async def test_chapter_body_empty_response_is_degraded() -> None:
    result = await _client(StubProvider(on_text=lambda request: "   ")).generate_chapter_body(
        "Jardins", "Solo", "Preparar o solo", "Leve", ContentType.EBOOK
    )

    assert result.degraded
    assert result.value == CHAPTER_EMPTY_PLACEHOLDER


async def test_cover_success() -> None:
    provider = StubProvider(on_image=lambda request: MOCK_PNG)
    result = await _client(provider).generate_cover_image("Jardins", "Jardinagem", ContentType.EBOOK)

    assert not result.degraded
    assert isinstance(result.value, CoverImage)
    assert result.value.mime_type == "image/png"
    assert result.value.to_bytes() == MOCK_PNG
    assert '"Jardins"' in provider.image_requests[0].prompt


async def test_cover_failure_is_absent_not_raised() -> None:
    def explode(request):
        raise RuntimeError("quota")

    result = await _client(StubProvider(on_image=explode)).generate_cover_image(
        "Jardins", "Jardinagem", ContentType.EBOOK
    )

    assert result.degraded
    assert result.value is None
    assert "quota" in result.cause


async def test_cover_from_text_only_provider_is_degraded() -> None:
    result = await _client(StubProvider()).generate_cover_image("Jardins", "Jardinagem", ContentType.COURSE)

    assert result.degraded
    assert result.value is None
    assert "ProviderCapabilityError" in result.cause


async def test_cache_reuses_successful_chapter_responses() -> None:
    provider = StubProvider(on_text=lambda request: "Texto")
    client = _client(provider, ttl_seconds=60)

    first = await client.generate_chapter_body("Jardins", "Solo", "Preparar", "Leve", ContentType.EBOOK)
    second = await client.generate_chapter_body("Jardins", "Solo", "Preparar", "Leve", ContentType.EBOOK)

    assert first.value == second.value == "Texto"
    assert len(provider.requests) == 1


async def test_cache_does_not_store_failures() -> None:
    answers = iter([RuntimeError("flaky"), "Texto"])

    def flaky(request):
        answer = next(answers)
        if isinstance(answer, Exception):
            raise answer
        return answer

    provider = StubProvider(on_text=flaky)
    client = _client(provider, ttl_seconds=60)

    first = await client.generate_chapter_body("Jardins", "Solo", "Preparar", "Leve", ContentType.EBOOK)
    second = await client.generate_chapter_body("Jardins", "Solo", "Preparar", "Leve", ContentType.EBOOK)

    assert first.degraded
    assert not second.degraded
    assert len(provider.requests) == 2


def _scripted(*answers):
    remaining = iter(answers)
    return StubProvider(on_text=lambda request: next(remaining))


async def test_malformed_outline_is_not_cached_so_retry_reaches_provider() -> None:
    provider = _scripted("not json", outline_json(make_outline("Solo", "Luz")))
    controller = PipelineController(_client(provider, ttl_seconds=900), StaticCredentialProbe())
    controller.start(ContentType.EBOOK)

    assert await controller.submit_input("Jardinagem", "Iniciantes") is False
    assert controller.status.step == PipelineStep.INPUT

    assert await controller.submit_input("Jardinagem", "Iniciantes") is True
    assert controller.status.step == PipelineStep.OUTLINE
    assert len(provider.requests) == 2


async def test_outline_failing_schema_is_not_cached() -> None:
    empty = json.dumps({"title": "Sem capítulos", "chapters": []})
    provider = _scripted(empty, outline_json(make_outline("Solo")))
    client = _client(provider, ttl_seconds=900)

    with pytest.raises(ProviderResponseError):
        await client.generate_outline("Jardinagem", "Iniciantes", "Leve", ContentType.EBOOK)
    outline = await client.generate_outline("Jardinagem", "Iniciantes", "Leve", ContentType.EBOOK)

    assert [chapter.title for chapter in outline.chapters] == ["Solo"]
    assert len(provider.requests) == 2


async def test_valid_outline_is_served_from_cache() -> None:
    provider = _scripted(outline_json(make_outline("Solo")))
    client = _client(provider, ttl_seconds=900)

    await client.generate_outline("Jardinagem", "Iniciantes", "Leve", ContentType.EBOOK)
    await client.generate_outline("Jardinagem", "Iniciantes", "Leve", ContentType.EBOOK)

    assert len(provider.requests) == 1


async def test_blank_chapter_response_is_not_cached() -> None:
    provider = _scripted("   ", "Texto real")
    client = _client(provider, ttl_seconds=900)

    first = await client.generate_chapter_body("Jardins", "Solo", "Preparar", "Leve", ContentType.EBOOK)
    second = await client.generate_chapter_body("Jardins", "Solo", "Preparar", "Leve", ContentType.EBOOK)

    assert first.degraded
    assert not second.degraded
    assert second.value == "Texto real"
    assert len(provider.requests) == 2
