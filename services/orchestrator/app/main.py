"""FastAPI entrypoint exposing the generation session to presentation clients."""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import Depends, FastAPI, HTTPException, Response, status
from fastapi.responses import PlainTextResponse

from genius_creator_observability import log_context, setup_fastapi_metrics, setup_logging

from .controller import PipelineController, build_controller
from .exceptions import InvalidTransitionError, PipelineError
from .export import export_filename
from .flows import run_project_flow
from .models import InputRequest, RunRequest, RunResponse, SessionView, StartRequest
from .progress import ProgressSnapshot

SERVICE_NAME = "orchestrator"
setup_logging(SERVICE_NAME)
logger = logging.getLogger(__name__)

app = FastAPI(title="GeniusCreator Orchestrator", version="0.1.0")
setup_fastapi_metrics(app, service_name=SERVICE_NAME)

# One in-memory session per process.
_CONTROLLER: PipelineController | None = None


def get_controller() -> PipelineController:
    global _CONTROLLER
    if _CONTROLLER is None:
        _CONTROLLER = build_controller()
    return _CONTROLLER


def _view(controller: PipelineController) -> SessionView:
    return SessionView(
        status=controller.status,
        project=controller.project,
        progress=controller.progress(),
    )


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/session", response_model=SessionView, tags=["session"])
async def read_session(controller: PipelineController = Depends(get_controller)) -> SessionView:
    return _view(controller)


@app.post("/session/start", response_model=SessionView, tags=["session"])
async def start_session(
    payload: StartRequest, controller: PipelineController = Depends(get_controller)
) -> SessionView:
    try:
        controller.start(payload.type)
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _view(controller)


@app.post("/session/input", response_model=SessionView, tags=["session"])
async def submit_input(
    payload: InputRequest, controller: PipelineController = Depends(get_controller)
) -> SessionView:
    try:
        await controller.submit_input(payload.topic, payload.target_audience, payload.tone)
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _view(controller)


@app.post(
    "/session/outline/confirm",
    response_model=SessionView,
    status_code=status.HTTP_202_ACCEPTED,
    tags=["session"],
)
async def confirm_outline(controller: PipelineController = Depends(get_controller)) -> SessionView:
    try:
        await controller.launch_generation()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _view(controller)


@app.post("/session/restart", response_model=SessionView, tags=["session"])
async def restart_session(controller: PipelineController = Depends(get_controller)) -> SessionView:
    controller.restart()
    return _view(controller)


@app.get("/session/progress", response_model=ProgressSnapshot, tags=["session"])
async def read_progress(controller: PipelineController = Depends(get_controller)) -> ProgressSnapshot:
    snapshot = controller.progress()
    if snapshot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active project")
    return snapshot


@app.get("/session/export", response_class=PlainTextResponse, tags=["session"])
async def export_project(controller: PipelineController = Depends(get_controller)) -> PlainTextResponse:
    try:
        markdown = controller.export()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    filename = export_filename(controller.project)
    return PlainTextResponse(
        markdown,
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@app.get("/session/cover", tags=["session"])
async def read_cover(controller: PipelineController = Depends(get_controller)) -> Response:
    project = controller.project
    if project is None or project.cover_image is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cover not available")
    return Response(content=project.cover_image.to_bytes(), media_type=project.cover_image.mime_type)


@app.post("/orchestrator/run", response_model=RunResponse, tags=["orchestrator"])
async def orchestrate(payload: RunRequest) -> RunResponse:
    with log_context(stage="pipeline"):
        logger.info("Dispatching headless run", extra={"content_type": payload.type.value})
    try:
        return await run_project_flow(payload)
    except PipelineError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
