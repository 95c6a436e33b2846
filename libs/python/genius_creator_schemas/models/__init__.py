from .project import (
    DEFAULT_TONE,
    Chapter,
    CoverImage,
    Outline,
    OutlineChapter,
    Project,
    ProjectInput,
    SessionStatus,
)
from .units import Degraded, Ok, UnitResult

__all__ = [
    "DEFAULT_TONE",
    "Chapter",
    "CoverImage",
    "Outline",
    "OutlineChapter",
    "Project",
    "ProjectInput",
    "SessionStatus",
    "Degraded",
    "Ok",
    "UnitResult",
]
