"""Prompt templates for outline, chapter and cover generation (pt-BR)."""

from __future__ import annotations

from genius_creator_schemas import ContentType

OUTLINE_SYSTEM_PROMPT = """
Você é um editor experiente especializado em criar {specialty}. Seu objetivo é estruturar
um conteúdo lógico, engajador e completo. O idioma deve ser Português do Brasil.
""".strip()


OUTLINE_PROMPT = """
Crie uma estrutura detalhada para um {format_name} sobre o tema: "{topic}".
Público-alvo: {audience}.
Tom de voz: {tone}.

Retorne um título criativo e uma lista de {unit_plural}.
Para cada item, forneça um título e uma breve descrição do que será abordado.
""".strip()


CHAPTER_PROMPT = """
Escreva o conteúdo completo para o capítulo/módulo: "{chapter_title}" do projeto "{project_title}" ({context}).
Descrição do capítulo: {chapter_description}.
Tom de voz: {tone}.

O conteúdo deve ser rico, formatado em Markdown (use títulos, listas, negrito para ênfase).
Se for curso, divida em lições claras. Se for e-book, escreva de forma fluida.
Mínimo de 600 palavras.
""".strip()


COVER_PROMPT = """
A professional, high-quality, minimalist cover design for a {format_name} titled "{title}".
Topic: {topic}.
Style: Modern, clean, vector art or high-end photography, cinematic lighting.
No text on the image other than the title if possible, but preferably just art.
Aspect ratio 2:3 (vertical book cover).
""".strip()


# Plain JSON schema so both Gemini and OpenAI accept it without $ref resolution.
OUTLINE_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {
            "type": "string",
            "description": "O título principal e chamativo do projeto.",
        },
        "chapters": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Título do capítulo ou módulo."},
                    "description": {
                        "type": "string",
                        "description": "Breve resumo do conteúdo deste capítulo.",
                    },
                },
                "required": ["title", "description"],
            },
        },
    },
    "required": ["title", "chapters"],
}


CHAPTER_ERROR_PLACEHOLDER = "Erro ao gerar este conteúdo. Tente novamente."
CHAPTER_EMPTY_PLACEHOLDER = "Conteúdo não gerado."


def outline_prompts(topic: str, audience: str, tone: str, content_type: ContentType) -> tuple[str, str]:
    """Return ``(system_prompt, prompt)`` for outline generation."""

    is_ebook = content_type == ContentType.EBOOK
    system_prompt = OUTLINE_SYSTEM_PROMPT.format(
        specialty="best-sellers" if is_ebook else "cursos online de alto impacto"
    )
    prompt = OUTLINE_PROMPT.format(
        format_name="e-book" if is_ebook else "curso online",
        topic=topic,
        audience=audience,
        tone=tone,
        unit_plural="capítulos" if is_ebook else "módulos",
    )
    return system_prompt, prompt


def chapter_prompt(
    project_title: str,
    chapter_title: str,
    chapter_description: str,
    tone: str,
    content_type: ContentType,
) -> str:
    return CHAPTER_PROMPT.format(
        chapter_title=chapter_title,
        project_title=project_title,
        context="um e-book" if content_type == ContentType.EBOOK else "um curso online",
        chapter_description=chapter_description,
        tone=tone,
    )


def cover_prompt(title: str, topic: str, content_type: ContentType) -> str:
    return COVER_PROMPT.format(
        format_name="book" if content_type == ContentType.EBOOK else "online course",
        title=title,
        topic=topic,
    )
