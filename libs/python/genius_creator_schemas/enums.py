"""Enum definitions shared across the generation pipeline."""

from __future__ import annotations

from enum import Enum


class ContentType(str, Enum):
    EBOOK = "EBOOK"
    COURSE = "COURSE"


class PipelineStep(str, Enum):
    HOME = "HOME"
    INPUT = "INPUT"
    OUTLINE = "OUTLINE"
    GENERATION = "GENERATION"
    RESULT = "RESULT"


class ChapterStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class CoverStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"


class GenerationUnit(str, Enum):
    """Labels used for logging and metrics of each provider call."""

    OUTLINE = "outline"
    CHAPTER = "chapter"
    COVER = "cover"


class SessionErrorKind(str, Enum):
    STRUCTURAL = "structural"
    CREDENTIAL = "credential"
    INPUT = "input"
