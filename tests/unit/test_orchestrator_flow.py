"""Tests for the Prefect flow using the mock provider."""

import pytest

from genius_creator_providers.config import PROVIDER_ENV_VAR
from genius_creator_providers.mock import MOCK_OUTLINE_CHAPTERS
from genius_creator_schemas import ContentType

from services.orchestrator.app.exceptions import CREDENTIAL_UNAVAILABLE_MESSAGE, PipelineError
from services.orchestrator.app.flows import run_project_flow
from services.orchestrator.app.models import RunRequest


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def offline_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    monkeypatch.setenv("LLM_CACHE_TTL_SECONDS", "0")


async def test_flow_with_mock_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PROVIDER_ENV_VAR, "mock")
    payload = RunRequest(type=ContentType.COURSE, topic="Python para dados", target_audience="Analistas")

    result = await run_project_flow.fn(payload)

    assert result.provider_name == "mock"
    assert [chapter.title for chapter in result.project.chapters] == [
        title for title, _ in MOCK_OUTLINE_CHAPTERS
    ]
    assert all(chapter.content for chapter in result.project.chapters)
    assert result.degraded_chapters == []
    assert result.cover_ready is True
    assert result.markdown.startswith("# Guia Essencial (mock)\n\n## Fundamentos\n\n")
    assert result.markdown.count("\n---\n") == len(MOCK_OUTLINE_CHAPTERS)


async def test_flow_without_credentials_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PROVIDER_ENV_VAR, "gemini")
    payload = RunRequest(topic="Jardinagem", target_audience="Iniciantes")

    with pytest.raises(PipelineError) as excinfo:
        await run_project_flow.fn(payload)
    assert str(excinfo.value) == CREDENTIAL_UNAVAILABLE_MESSAGE
