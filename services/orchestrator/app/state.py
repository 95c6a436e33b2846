"""Session state and the pure reducer that advances it.

Each event produces a brand new :class:`SessionState`; nothing is mutated in
place, so an observer holding a previous state never sees a torn update.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Type, Union

from pydantic import BaseModel

from genius_creator_schemas import (
    Chapter,
    ContentType,
    CoverImage,
    Outline,
    PipelineStep,
    Project,
    ProjectInput,
    SessionErrorKind,
    SessionStatus,
    UnitResult,
)

from .exceptions import InvalidTransitionError


class SessionState(BaseModel):
    status: SessionStatus = SessionStatus()
    project: Project | None = None

    @classmethod
    def initial(cls) -> "SessionState":
        return cls()

    class Config:
        frozen = True


@dataclass(frozen=True, slots=True)
class ProjectStarted:
    content_type: ContentType


@dataclass(frozen=True, slots=True)
class OutlineRequested:
    pass


@dataclass(frozen=True, slots=True)
class OutlineAccepted:
    submission: ProjectInput
    outline: Outline


@dataclass(frozen=True, slots=True)
class SessionFailed:
    kind: SessionErrorKind
    message: str


@dataclass(frozen=True, slots=True)
class ConfirmRequested:
    pass


@dataclass(frozen=True, slots=True)
class GenerationStarted:
    pass


@dataclass(frozen=True, slots=True)
class ChapterStarted:
    index: int


@dataclass(frozen=True, slots=True)
class ChapterCompleted:
    index: int
    result: UnitResult[str]


@dataclass(frozen=True, slots=True)
class CoverSettled:
    result: UnitResult[CoverImage | None]


@dataclass(frozen=True, slots=True)
class GenerationFinished:
    pass


@dataclass(frozen=True, slots=True)
class Restarted:
    pass


Event = Union[
    ProjectStarted,
    OutlineRequested,
    OutlineAccepted,
    SessionFailed,
    ConfirmRequested,
    GenerationStarted,
    ChapterStarted,
    ChapterCompleted,
    CoverSettled,
    GenerationFinished,
    Restarted,
]


def _require(state: SessionState, event: Event, *steps: PipelineStep, idle: bool = False) -> Project:
    name = type(event).__name__
    if state.status.step not in steps:
        raise InvalidTransitionError(f"{name} is not allowed during {state.status.step.value}")
    if idle and state.status.busy:
        raise InvalidTransitionError(f"{name} is not allowed while a request is in flight")
    if state.project is None:
        raise InvalidTransitionError(f"{name} requires an active project")
    return state.project


def _replace_chapter(project: Project, index: int, **changes) -> Project:
    if not 0 <= index < len(project.chapters):
        raise InvalidTransitionError(f"Chapter index {index} is out of range")
    chapters = list(project.chapters)
    chapters[index] = chapters[index].model_copy(update=changes)
    return project.model_copy(update={"chapters": chapters})


def _project_started(state: SessionState, event: ProjectStarted) -> SessionState:
    if state.status.step != PipelineStep.HOME:
        raise InvalidTransitionError(f"ProjectStarted is not allowed during {state.status.step.value}")
    return SessionState(
        status=SessionStatus(step=PipelineStep.INPUT),
        project=Project(type=event.content_type),
    )


def _outline_requested(state: SessionState, event: OutlineRequested) -> SessionState:
    _require(state, event, PipelineStep.INPUT, idle=True)
    return state.model_copy(update={"status": SessionStatus(step=PipelineStep.INPUT, busy=True)})


def _outline_accepted(state: SessionState, event: OutlineAccepted) -> SessionState:
    project = _require(state, event, PipelineStep.INPUT)
    submission = event.submission
    project = project.model_copy(
        update={
            "topic": submission.topic,
            "target_audience": submission.target_audience,
            "tone": submission.tone,
            "title": event.outline.title,
            "chapters": [
                Chapter(title=item.title, description=item.description, generating=False)
                for item in event.outline.chapters
            ],
        }
    )
    return SessionState(status=SessionStatus(step=PipelineStep.OUTLINE), project=project)


def _session_failed(state: SessionState, event: SessionFailed) -> SessionState:
    _require(state, event, PipelineStep.INPUT, PipelineStep.OUTLINE)
    status = SessionStatus(
        step=state.status.step, busy=False, error=event.message, error_kind=event.kind
    )
    return state.model_copy(update={"status": status})


def _confirm_requested(state: SessionState, event: ConfirmRequested) -> SessionState:
    _require(state, event, PipelineStep.OUTLINE, idle=True)
    return state.model_copy(update={"status": SessionStatus(step=PipelineStep.OUTLINE)})


def _generation_started(state: SessionState, event: GenerationStarted) -> SessionState:
    _require(state, event, PipelineStep.OUTLINE, idle=True)
    return state.model_copy(
        update={"status": SessionStatus(step=PipelineStep.GENERATION, busy=True)}
    )


def _chapter_started(state: SessionState, event: ChapterStarted) -> SessionState:
    project = _require(state, event, PipelineStep.GENERATION)
    in_flight = [i for i, chapter in enumerate(project.chapters) if chapter.generating]
    if in_flight and in_flight != [event.index]:
        raise InvalidTransitionError(
            f"Chapter {event.index} cannot start while chapter {in_flight[0]} is generating"
        )
    return state.model_copy(
        update={"project": _replace_chapter(project, event.index, generating=True)}
    )


def _chapter_completed(state: SessionState, event: ChapterCompleted) -> SessionState:
    project = _require(state, event, PipelineStep.GENERATION)
    if 0 <= event.index < len(project.chapters) and project.chapters[event.index].content:
        raise InvalidTransitionError(f"Chapter {event.index} already has content")
    project = _replace_chapter(
        project,
        event.index,
        content=event.result.value,
        generating=False,
        degraded_reason=event.result.cause,
    )
    return state.model_copy(update={"project": project})


def _cover_settled(state: SessionState, event: CoverSettled) -> SessionState:
    project = _require(state, event, PipelineStep.GENERATION)
    if event.result.value is None:
        return state
    return state.model_copy(
        update={"project": project.model_copy(update={"cover_image": event.result.value})}
    )


def _generation_finished(state: SessionState, event: GenerationFinished) -> SessionState:
    _require(state, event, PipelineStep.GENERATION)
    return state.model_copy(update={"status": SessionStatus(step=PipelineStep.RESULT)})


def _restarted(state: SessionState, event: Restarted) -> SessionState:
    return SessionState.initial()


_REDUCERS: Dict[Type, Callable[[SessionState, Event], SessionState]] = {
    ProjectStarted: _project_started,
    OutlineRequested: _outline_requested,
    OutlineAccepted: _outline_accepted,
    SessionFailed: _session_failed,
    ConfirmRequested: _confirm_requested,
    GenerationStarted: _generation_started,
    ChapterStarted: _chapter_started,
    ChapterCompleted: _chapter_completed,
    CoverSettled: _cover_settled,
    GenerationFinished: _generation_finished,
    Restarted: _restarted,
}


def reduce(state: SessionState, event: Event) -> SessionState:
    """Return the state that follows ``event``.

    Raises:
        InvalidTransitionError: If ``event`` is not allowed in the current step.
    """

    handler = _REDUCERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unknown session event: {type(event).__name__}")
    return handler(state, event)
