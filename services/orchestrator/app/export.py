"""Markdown export of a finished project."""

from __future__ import annotations

import re

from genius_creator_schemas import Project

SECTION_DELIMITER = "---"

_WHITESPACE = re.compile(r"\s+")


def export_markdown(project: Project) -> str:
    """Render the project as one Markdown document; pure and deterministic."""

    parts = [f"# {project.title}\n\n"]
    for chapter in project.chapters:
        parts.append(f"## {chapter.title}\n\n{chapter.content or ''}\n\n{SECTION_DELIMITER}\n\n")
    return "".join(parts)


def export_filename(project: Project) -> str:
    stem = _WHITESPACE.sub("_", project.title.strip()) or "projeto"
    return f"{stem}.md"
