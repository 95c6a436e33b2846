"""Pydantic models for the orchestrator API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from genius_creator_schemas import ContentType, Project, SessionStatus
from genius_creator_schemas.models.project import DEFAULT_TONE

from .progress import ProgressSnapshot


class ProviderOverride(BaseModel):
    name: Optional[str] = Field(
        None, description="Provider identifier: gemini, openai, mock"
    )
    model: Optional[str] = None
    image_model: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_output_tokens: Optional[int] = Field(None, ge=16)
    json_mode: Optional[bool] = None
    top_p: Optional[float] = Field(None, ge=0, le=1)
    reasoning_effort: Optional[str] = Field(
        None,
        description="OpenAI reasoning effort (minimal, low, medium, high)",
    )
    verbosity: Optional[str] = Field(
        None, description="OpenAI GPT-5 verbosity (low, medium, high)"
    )
    thinking_budget: Optional[int] = Field(
        None,
        description="Gemini 2.5 thinking budget in tokens; -1 enables dynamic thinking",
    )
    include_thoughts: Optional[bool] = Field(
        None, description="Gemini 2.5 thought summaries toggle"
    )


class StartRequest(BaseModel):
    type: ContentType


class InputRequest(BaseModel):
    topic: str
    target_audience: str
    tone: str = DEFAULT_TONE


class SessionView(BaseModel):
    status: SessionStatus
    project: Project | None = None
    progress: ProgressSnapshot | None = None


class RunRequest(BaseModel):
    type: ContentType = ContentType.EBOOK
    topic: str = Field(..., min_length=1)
    target_audience: str = Field(..., min_length=1)
    tone: str = DEFAULT_TONE
    provider: ProviderOverride | None = None


class RunResponse(BaseModel):
    run_id: UUID
    provider_name: str
    project: Project
    markdown: str
    degraded_chapters: List[int] = Field(default_factory=list)
    cover_ready: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
