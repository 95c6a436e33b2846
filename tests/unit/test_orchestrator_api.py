"""HTTP tests for the orchestrator session endpoints."""

import time

import pytest
from fastapi.testclient import TestClient

from genius_creator_schemas import ContentType, Project

from services.orchestrator.app import main
from services.orchestrator.app.controller import PipelineController
from services.orchestrator.app.exceptions import PipelineError
from services.orchestrator.app.models import RunResponse
from tests.utils.fakes import FakeGenerationClient, StaticCredentialProbe, make_outline


@pytest.fixture
def controller():
    controller = PipelineController(
        FakeGenerationClient(make_outline("Solo", "Luz", "Rega")), StaticCredentialProbe()
    )
    main.app.dependency_overrides[main.get_controller] = lambda: controller
    yield controller
    main.app.dependency_overrides.clear()


@pytest.fixture
def client(controller):
    with TestClient(main.app) as test_client:
        yield test_client


def _wait_for_step(client: TestClient, step: str) -> dict:
    for _ in range(200):
        body = client.get("/session").json()
        if body["status"]["step"] == step:
            return body
        time.sleep(0.01)
    raise AssertionError(f"session never reached {step}")


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_session_walkthrough(client: TestClient) -> None:
    response = client.post("/session/start", json={"type": "EBOOK"})
    assert response.status_code == 200
    assert response.json()["status"]["step"] == "INPUT"

    assert client.post("/session/start", json={"type": "COURSE"}).status_code == 409

    response = client.post(
        "/session/input", json={"topic": "Jardinagem urbana", "target_audience": "Iniciantes"}
    )
    body = response.json()
    assert body["status"]["step"] == "OUTLINE"
    assert [chapter["title"] for chapter in body["project"]["chapters"]] == ["Solo", "Luz", "Rega"]
    assert body["project"]["tone"] == "Inspirador e Prático"

    assert client.get("/session/export").status_code == 409

    response = client.post("/session/outline/confirm")
    assert response.status_code == 202

    body = _wait_for_step(client, "RESULT")
    assert body["progress"]["percentage"] == 100
    assert body["progress"]["cover"] == "ready"

    export = client.get("/session/export")
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/markdown")
    assert "Jardins_Suspensos.md" in export.headers["content-disposition"]
    assert export.text.startswith("# Jardins Suspensos\n\n## Solo\n\n")

    cover = client.get("/session/cover")
    assert cover.status_code == 200
    assert cover.headers["content-type"] == "image/png"

    response = client.post("/session/restart")
    assert response.json()["status"]["step"] == "HOME"
    assert response.json()["project"] is None
    assert client.get("/session/progress").status_code == 404
    assert client.get("/session/cover").status_code == 404


def test_input_failure_is_reported_in_status(client: TestClient) -> None:
    client.post("/session/start", json={"type": "COURSE"})
    response = client.post("/session/input", json={"topic": " ", "target_audience": "Analistas"})
    assert response.status_code == 200
    status = response.json()["status"]
    assert status["step"] == "INPUT"
    assert status["error_kind"] == "input"
    assert status["error"]


def test_confirm_outside_outline_conflicts(client: TestClient) -> None:
    assert client.post("/session/outline/confirm").status_code == 409


def test_headless_run_endpoint(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_flow(payload):
        project = Project(type=payload.type, topic=payload.topic, title="Guia")
        return RunResponse(
            run_id="00000000-0000-0000-0000-000000000001",
            provider_name="mock",
            project=project,
            markdown="# Guia\n\n",
        )

    monkeypatch.setattr(main, "run_project_flow", fake_flow)
    response = client.post(
        "/orchestrator/run",
        json={"type": "COURSE", "topic": "Python", "target_audience": "Analistas"},
    )
    assert response.status_code == 200
    assert response.json()["project"]["type"] == ContentType.COURSE.value


def test_headless_run_failure_maps_to_bad_gateway(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def failing_flow(payload):
        raise PipelineError("Outline generation failed")

    monkeypatch.setattr(main, "run_project_flow", failing_flow)
    response = client.post(
        "/orchestrator/run", json={"topic": "Python", "target_audience": "Analistas"}
    )
    assert response.status_code == 502


def test_metrics_endpoint(client: TestClient) -> None:
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "genius_creator_http_requests_total" in response.text
