"""Read-only progress projection over a project.

Everything here is recomputed from the project alone; no counters are tracked.
"""

from __future__ import annotations

from pydantic import BaseModel

from genius_creator_schemas import Chapter, ChapterStatus, CoverStatus, Project


class ChapterProgress(BaseModel):
    index: int
    title: str
    status: ChapterStatus


class ProgressSnapshot(BaseModel):
    completed: int
    total: int
    percentage: int
    chapters: list[ChapterProgress]
    cover: CoverStatus


def chapter_status(chapter: Chapter) -> ChapterStatus:
    # Content wins over the in-flight flag.
    if chapter.is_complete:
        return ChapterStatus.DONE
    if chapter.generating:
        return ChapterStatus.IN_PROGRESS
    return ChapterStatus.PENDING


def completion_percentage(completed: int, total: int) -> int:
    """Percentage rounded half up, 0 when there is nothing to complete."""

    if total <= 0:
        return 0
    return (completed * 200 + total) // (total * 2)


def project_progress(project: Project) -> ProgressSnapshot:
    chapters = [
        ChapterProgress(index=index, title=chapter.title, status=chapter_status(chapter))
        for index, chapter in enumerate(project.chapters)
    ]
    completed = sum(1 for item in chapters if item.status == ChapterStatus.DONE)
    total = len(chapters)
    return ProgressSnapshot(
        completed=completed,
        total=total,
        percentage=completion_percentage(completed, total),
        chapters=chapters,
        cover=CoverStatus.READY if project.cover_image is not None else CoverStatus.PENDING,
    )
