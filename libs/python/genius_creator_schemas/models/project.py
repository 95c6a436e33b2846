"""Domain models describing a document in progress and the session around it."""

from __future__ import annotations

import base64
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..enums import ContentType, PipelineStep, SessionErrorKind
from ..utils.validators import ensure_not_blank

DEFAULT_TONE = "Inspirador e Prático"


class OutlineChapter(BaseModel):
    """One chapter (or course module) proposed by the outline."""

    title: str = Field(..., min_length=1, description="Título do capítulo ou módulo.")
    description: str = Field(..., description="Breve resumo do conteúdo deste capítulo.")


class Outline(BaseModel):
    """Title plus the ordered chapter list returned by outline generation."""

    title: str = Field(..., min_length=1, description="O título principal e chamativo do projeto.")
    chapters: list[OutlineChapter] = Field(..., min_length=1)


class ProjectInput(BaseModel):
    """Topic, audience and tone submitted from the input step."""

    topic: str
    target_audience: str
    tone: str = DEFAULT_TONE

    @field_validator("topic")
    @classmethod
    def validate_topic(cls, value: str) -> str:
        return ensure_not_blank(value, field_name="Topic")

    @field_validator("target_audience")
    @classmethod
    def validate_audience(cls, value: str) -> str:
        return ensure_not_blank(value, field_name="Target audience")

    @field_validator("tone")
    @classmethod
    def default_tone(cls, value: str) -> str:
        return (value or "").strip() or DEFAULT_TONE


class Chapter(BaseModel):
    """A chapter of the project.

    ``content`` is written exactly once, when its generation call returns.
    ``generating`` is only true while that call is in flight.
    """

    title: str
    description: str
    content: Optional[str] = None
    generating: bool = False
    degraded_reason: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.content)

    class Config:
        frozen = True


class CoverImage(BaseModel):
    """Generated cover, kept base64 encoded so the project stays JSON friendly."""

    mime_type: str = "image/png"
    data: str

    @classmethod
    def from_bytes(cls, payload: bytes, mime_type: str = "image/png") -> "CoverImage":
        return cls(mime_type=mime_type, data=base64.b64encode(payload).decode("ascii"))

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)

    class Config:
        frozen = True


class Project(BaseModel):
    """The document being produced during a session."""

    type: ContentType
    topic: str = ""
    target_audience: str = ""
    tone: str = ""
    title: str = ""
    chapters: list[Chapter] = Field(default_factory=list)
    cover_image: Optional[CoverImage] = None

    class Config:
        frozen = True


class SessionStatus(BaseModel):
    """UI-facing status, replaced wholesale at each transition."""

    step: PipelineStep = PipelineStep.HOME
    busy: bool = False
    error: Optional[str] = None
    error_kind: Optional[SessionErrorKind] = None

    class Config:
        frozen = True
