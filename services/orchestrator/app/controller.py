"""Pipeline controller driving a session from HOME to RESULT.

The controller owns the only mutable reference to the session state. Every
change goes through :func:`state.reduce`, and every change produced by async
work is tagged with the session epoch it started in. ``restart`` bumps the
epoch and cancels in-flight work, so a provider call that resolves after a
restart is discarded instead of leaking into the new session.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from genius_creator_observability import log_context
from genius_creator_providers import ProviderError
from genius_creator_schemas import (
    ContentType,
    Outline,
    PipelineStep,
    Project,
    ProjectInput,
    SessionStatus,
)
from genius_creator_schemas.models.project import DEFAULT_TONE
from pydantic import ValidationError

from .credentials import CredentialProbe, ProviderCredentialProbe
from .exceptions import (
    CredentialUnavailable,
    InputRejected,
    InvalidTransitionError,
    SessionFailure,
    StructuralFailure,
)
from .export import export_markdown
from .generation import GenerationClient
from .models import ProviderOverride
from .progress import ProgressSnapshot, project_progress
from .state import (
    ChapterCompleted,
    ChapterStarted,
    ConfirmRequested,
    CoverSettled,
    Event,
    GenerationFinished,
    GenerationStarted,
    OutlineAccepted,
    OutlineRequested,
    ProjectStarted,
    Restarted,
    SessionFailed,
    SessionState,
    reduce,
)

logger = logging.getLogger(__name__)

Listener = Callable[[SessionState], None]


class PipelineController:
    """Runs the generation pipeline for a single session."""

    def __init__(
        self,
        client: GenerationClient,
        credentials: CredentialProbe | None = None,
    ) -> None:
        self._client = client
        self._credentials = credentials or ProviderCredentialProbe()
        self._state = SessionState.initial()
        self._epoch = 0
        self._listeners: List[Listener] = []
        self._outline_task: Optional[asyncio.Task] = None
        self._generation_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def project(self) -> Project | None:
        return self._state.project

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def generation_task(self) -> Optional[asyncio.Task]:
        return self._generation_task

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with every committed state; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Actions

    def start(self, content_type: ContentType) -> SessionState:
        self._commit(ProjectStarted(content_type))
        logger.info("Project started", extra={"content_type": content_type.value})
        return self._state

    async def submit_input(
        self, topic: str, target_audience: str, tone: str = DEFAULT_TONE
    ) -> bool:
        """Generate the outline; ``True`` when the session advanced to OUTLINE.

        On failure the session stays on INPUT with ``error`` set.
        """

        epoch = self._epoch
        self._commit(OutlineRequested())
        with log_context(session_epoch=epoch, step=PipelineStep.INPUT.value):
            try:
                submission = _validate_input(topic, target_audience, tone)
                await self._ensure_credentials()
                outline = await self._request_outline(submission)
            except SessionFailure as failure:
                logger.warning(
                    "Outline step failed",
                    extra={"error_kind": failure.kind.value, "reason": repr(failure.__cause__)},
                )
                self._commit(SessionFailed(failure.kind, failure.user_message), epoch)
                return False
            except asyncio.CancelledError:
                if self._epoch != epoch:
                    logger.info("Outline request abandoned by restart")
                    return False
                self._commit(
                    SessionFailed(StructuralFailure.kind, StructuralFailure.default_message), epoch
                )
                raise

            advanced = self._commit(OutlineAccepted(submission, outline), epoch)
            if advanced:
                logger.info("Outline ready", extra={"chapter_count": len(outline.chapters)})
            return advanced

    async def launch_generation(self) -> Optional[asyncio.Task]:
        """Approve the outline and start the generation phase in the background.

        Returns the phase task, or ``None`` when the credential gate failed
        (the session then stays on OUTLINE with ``error`` set).
        """

        epoch = self._epoch
        self._commit(ConfirmRequested())
        with log_context(session_epoch=epoch, step=PipelineStep.OUTLINE.value):
            try:
                await self._ensure_credentials()
            except CredentialUnavailable as failure:
                logger.warning("Generation blocked by missing credentials")
                self._commit(SessionFailed(failure.kind, failure.user_message), epoch)
                return None

            project = self._state.project
            if project is None or not self._commit(GenerationStarted(), epoch):
                return None

            task = asyncio.create_task(
                self._run_generation(project, epoch), name=f"generation-{epoch}"
            )
        task.add_done_callback(_log_generation_failure)
        self._generation_task = task
        return task

    async def confirm_outline(self) -> bool:
        """Approve the outline and wait for the phase; ``True`` once RESULT is reached."""

        epoch = self._epoch
        task = await self.launch_generation()
        if task is None:
            return False
        try:
            # Cancelling the caller stops the wait, not the phase.
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if self._epoch != epoch:
                return False
            raise
        return self._epoch == epoch and self._state.status.step == PipelineStep.RESULT

    def restart(self) -> SessionState:
        """Discard the project and return to HOME; safe at any point."""

        self._epoch += 1
        for task in (self._outline_task, self._generation_task):
            if task is not None and not task.done():
                task.cancel()
        self._outline_task = None
        self._generation_task = None
        self._commit(Restarted())
        logger.info("Session restarted", extra={"session_epoch": self._epoch})
        return self._state

    # Read-only views

    def progress(self) -> ProgressSnapshot | None:
        project = self._state.project
        return project_progress(project) if project is not None else None

    def export(self) -> str:
        if self._state.status.step != PipelineStep.RESULT or self._state.project is None:
            raise InvalidTransitionError("Export is only available once the project is complete")
        return export_markdown(self._state.project)

    # Internals

    def _commit(self, event: Event, epoch: int | None = None) -> bool:
        if epoch is not None and epoch != self._epoch:
            logger.info(
                "Discarding stale event",
                extra={"event": type(event).__name__, "event_epoch": epoch},
            )
            return False
        self._state = reduce(self._state, event)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Session listener failed")
        return True

    async def _ensure_credentials(self) -> None:
        try:
            if await self._credentials.is_available():
                return
            if await self._credentials.acquire():
                logger.info("Provider credential acquired")
                return
        except Exception as exc:
            logger.exception("Credential check failed")
            raise CredentialUnavailable() from exc
        raise CredentialUnavailable()

    async def _request_outline(self, submission: ProjectInput) -> Outline:
        project = self._state.project
        if project is None:
            raise InvalidTransitionError("Outline requested without an active project")
        task = asyncio.ensure_future(
            self._client.generate_outline(
                submission.topic, submission.target_audience, submission.tone, project.type
            )
        )
        self._outline_task = task
        try:
            return await task
        except ProviderError as exc:
            raise StructuralFailure() from exc
        finally:
            if self._outline_task is task:
                self._outline_task = None

    async def _run_generation(self, project: Project, epoch: int) -> None:
        logger.info("Generation started", extra={"chapter_count": len(project.chapters)})
        chapters = asyncio.create_task(
            self._generate_chapters(project, epoch), name=f"chapters-{epoch}"
        )
        cover = asyncio.create_task(self._generate_cover(project, epoch), name=f"cover-{epoch}")
        try:
            await asyncio.gather(chapters, cover)
        finally:
            for task in (chapters, cover):
                if not task.done():
                    task.cancel()

        if self._commit(GenerationFinished(), epoch):
            finished = self._state.project
            degraded = [
                index
                for index, chapter in enumerate(finished.chapters if finished else [])
                if chapter.degraded_reason
            ]
            logger.info(
                "Generation finished",
                extra={
                    "degraded_chapters": degraded,
                    "cover_ready": bool(finished and finished.cover_image),
                },
            )

    async def _generate_chapters(self, project: Project, epoch: int) -> None:
        for index, chapter in enumerate(project.chapters):
            if not self._commit(ChapterStarted(index), epoch):
                return
            with log_context(chapter_index=index):
                result = await self._client.generate_chapter_body(
                    project.title,
                    chapter.title,
                    chapter.description,
                    project.tone,
                    project.type,
                )
                if result.degraded:
                    logger.warning("Chapter degraded", extra={"reason": result.cause})
            if not self._commit(ChapterCompleted(index, result), epoch):
                return

    async def _generate_cover(self, project: Project, epoch: int) -> None:
        result = await self._client.generate_cover_image(project.title, project.topic, project.type)
        if result.degraded:
            logger.warning("Cover unavailable", extra={"reason": result.cause})
        self._commit(CoverSettled(result), epoch)


def build_controller(override: ProviderOverride | None = None) -> PipelineController:
    """Controller wired to the configured provider and its credential probe."""

    return PipelineController(
        GenerationClient(override),
        ProviderCredentialProbe(override),
    )


def _validate_input(topic: str, target_audience: str, tone: str) -> ProjectInput:
    try:
        return ProjectInput(topic=topic, target_audience=target_audience, tone=tone)
    except ValidationError as exc:
        raise InputRejected() from exc


def _log_generation_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Generation phase crashed", exc_info=exc)
