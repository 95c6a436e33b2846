"""Shared enums and domain models for GeniusCreator."""

from .enums import (
    ChapterStatus,
    ContentType,
    CoverStatus,
    GenerationUnit,
    PipelineStep,
    SessionErrorKind,
)
from .models import (
    DEFAULT_TONE,
    Chapter,
    CoverImage,
    Degraded,
    Ok,
    Outline,
    OutlineChapter,
    Project,
    ProjectInput,
    SessionStatus,
    UnitResult,
)

__all__ = [
    "ChapterStatus",
    "ContentType",
    "CoverStatus",
    "GenerationUnit",
    "PipelineStep",
    "SessionErrorKind",
    "DEFAULT_TONE",
    "Chapter",
    "CoverImage",
    "Degraded",
    "Ok",
    "Outline",
    "OutlineChapter",
    "Project",
    "ProjectInput",
    "SessionStatus",
    "UnitResult",
]
