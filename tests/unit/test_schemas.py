"""Smoke tests for Pydantic schema validation."""

import pytest
from pydantic import ValidationError

from genius_creator_schemas import (
    DEFAULT_TONE,
    Chapter,
    ContentType,
    CoverImage,
    Degraded,
    Ok,
    Outline,
    Project,
    ProjectInput,
)
from genius_creator_schemas.utils.validators import BlankFieldError, ensure_not_blank


def test_project_input_strips_and_defaults_tone() -> None:
    submission = ProjectInput(topic="  Jardinagem urbana ", target_audience="Iniciantes", tone="   ")
    assert submission.topic == "Jardinagem urbana"
    assert submission.tone == DEFAULT_TONE


@pytest.mark.parametrize("field", ["topic", "target_audience"])
def test_project_input_rejects_blank_fields(field: str) -> None:
    payload = {"topic": "Jardinagem", "target_audience": "Iniciantes", field: "  "}
    with pytest.raises(ValidationError):
        ProjectInput(**payload)


def test_outline_requires_chapters() -> None:
    with pytest.raises(ValidationError):
        Outline(title="Vazio", chapters=[])


def test_outline_preserves_order() -> None:
    outline = Outline.model_validate(
        {
            "title": "Jardins",
            "chapters": [
                {"title": "Solo", "description": "Preparar"},
                {"title": "Luz", "description": "Iluminar"},
            ],
        }
    )
    assert [item.title for item in outline.chapters] == ["Solo", "Luz"]


def test_chapter_is_frozen() -> None:
    chapter = Chapter(title="Solo", description="Preparar")
    assert chapter.is_complete is False
    with pytest.raises(ValidationError):
        chapter.content = "texto"


def test_chapter_copy_leaves_original_untouched() -> None:
    chapter = Chapter(title="Solo", description="Preparar")
    updated = chapter.model_copy(update={"content": "texto"})
    assert updated.is_complete
    assert chapter.content is None


def test_cover_image_round_trip() -> None:
    cover = CoverImage.from_bytes(b"\x89PNGdata")
    assert cover.mime_type == "image/png"
    assert cover.data == "iVBOR2RhdGE="
    assert cover.to_bytes() == b"\x89PNGdata"


def test_project_defaults() -> None:
    project = Project(type=ContentType.COURSE)
    assert project.chapters == []
    assert project.cover_image is None


def test_unit_results_expose_degradation() -> None:
    assert Ok("texto").degraded is False
    assert Ok("texto").cause is None
    degraded = Degraded("placeholder", "timeout")
    assert degraded.degraded is True
    assert degraded.cause == "timeout"


def test_ensure_not_blank() -> None:
    assert ensure_not_blank("  a ", field_name="Topic") == "a"
    with pytest.raises(BlankFieldError):
        ensure_not_blank(" \n", field_name="Topic")
