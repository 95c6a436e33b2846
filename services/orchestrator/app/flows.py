"""Prefect flow running one project from topic to finished document."""

from __future__ import annotations

import logging
from uuid import uuid4

from prefect import flow

from genius_creator_observability import log_context
from genius_creator_providers import ProviderConfigError

from .controller import build_controller
from .exceptions import PipelineError
from .export import export_markdown
from .models import RunRequest, RunResponse
from .providers import resolve_provider_config

logger = logging.getLogger(__name__)


@flow(name="genius-creator-flow", version="0.1.0")
async def run_project_flow(payload: RunRequest) -> RunResponse:
    """Drive start -> input -> confirm without a presentation layer.

    Raises:
        PipelineError: When the outline or credential gate fails.
    """

    run_id = uuid4()
    try:
        provider_name = resolve_provider_config(payload.provider).name
    except ProviderConfigError:
        provider_name = payload.provider.name if payload.provider and payload.provider.name else "unknown"

    controller = build_controller(payload.provider)

    with log_context(run_id=str(run_id), provider=provider_name):
        logger.info("Starting headless run", extra={"content_type": payload.type.value})
        controller.start(payload.type)

        if not await controller.submit_input(payload.topic, payload.target_audience, payload.tone):
            raise PipelineError(controller.status.error or "Outline generation failed")
        if not await controller.confirm_outline():
            raise PipelineError(controller.status.error or "Generation did not complete")

        project = controller.project
        degraded = [index for index, chapter in enumerate(project.chapters) if chapter.degraded_reason]
        logger.info(
            "Headless run finished",
            extra={"chapter_count": len(project.chapters), "degraded_chapters": degraded},
        )

    return RunResponse(
        run_id=run_id,
        provider_name=provider_name,
        project=project,
        markdown=export_markdown(project),
        degraded_chapters=degraded,
        cover_ready=project.cover_image is not None,
    )
