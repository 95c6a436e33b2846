"""Configuration models and helpers for provider selection."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field

from .exceptions import ProviderConfigError

PROVIDER_ENV_VAR = "LLM_PROVIDER"
DEFAULT_PROVIDER = "gemini"

DEFAULT_IMAGE_MODELS = {
    "gemini": "gemini-3-pro-image-preview",
    "openai": "gpt-image-1",
}


class ProviderSettings(BaseModel):
    """Per-call default parameters."""

    temperature: float = Field(0.7, ge=0, le=2)
    max_output_tokens: int | None = Field(None, ge=16)
    top_p: float | None = Field(None, ge=0, le=1)
    json_mode: bool = Field(False)
    reasoning_effort: str | None = Field(
        None, description="Default reasoning effort parameter for OpenAI reasoning models"
    )
    verbosity: str | None = Field(
        None, description="Default verbosity hint for OpenAI GPT-5 family"
    )
    thinking_budget: int | None = Field(
        None,
        description=(
            "Default thinking token budget for Gemini 2.5 models; use -1 for dynamic thinking"
        ),
    )
    include_thoughts: bool = Field(
        False, description="Whether Gemini responses should include thought summaries by default"
    )


class ProviderConfig(BaseModel):
    """Configuration for a single provider instance."""

    name: str
    api_key: str
    model: str
    image_model: str | None = None
    settings: ProviderSettings = Field(default_factory=ProviderSettings)

    class Config:
        frozen = True


def load_provider_config(prefix: str | None = None) -> ProviderConfig:
    """Load configuration from environment variables.

    Args:
        prefix: Optional prefix for environment variables (default uses provider name).

    Environment variables used (assuming prefix "GEMINI"):
        GEMINI_API_KEY
        GEMINI_MODEL
        GEMINI_IMAGE_MODEL (optional, defaults per provider)
        GEMINI_TEMPERATURE (optional)
        GEMINI_MAX_OUTPUT_TOKENS (optional)
        GEMINI_TOP_P (optional)
        GEMINI_JSON_MODE (optional boolean)
        GEMINI_THINKING_BUDGET (optional)
        GEMINI_INCLUDE_THOUGHTS (optional boolean)

    Returns:
        ProviderConfig object populated from environment variables.

    Raises:
        ProviderConfigError: If required variables are missing or invalid.
    """

    provider_name = (prefix or os.getenv(PROVIDER_ENV_VAR, DEFAULT_PROVIDER)).upper()
    env_prefix = provider_name

    def read_env(key: str, default: Any | None = None) -> Any:
        return os.getenv(f"{env_prefix}_{key}", default)

    def read_optional(key: str) -> str | None:
        value = read_env(key)
        if isinstance(value, str):
            value = value.strip()
        return value or None

    def parse_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        return str(value).strip().lower() in {"true", "1", "yes", "on"}

    api_key = read_optional("API_KEY")
    model = read_optional("MODEL")
    if not api_key or not model:
        raise ProviderConfigError(
            f"{env_prefix}_API_KEY and {env_prefix}_MODEL must be configured"
        )

    try:
        temperature = float(read_env("TEMPERATURE", 0.7))
    except ValueError as exc:
        raise ProviderConfigError("TEMPERATURE must be a float between 0 and 2") from exc

    max_output_tokens = None
    max_output_raw = read_optional("MAX_OUTPUT_TOKENS")
    if max_output_raw is not None:
        try:
            parsed_max = int(max_output_raw)
        except ValueError as exc:
            raise ProviderConfigError("MAX_OUTPUT_TOKENS must be a positive integer") from exc
        max_output_tokens = parsed_max if parsed_max > 0 else None

    top_p_raw = read_optional("TOP_P")
    try:
        top_p = float(top_p_raw) if top_p_raw is not None else None
    except ValueError as exc:
        raise ProviderConfigError("TOP_P must be a float between 0 and 1") from exc

    thinking_budget = None
    thinking_budget_raw = read_optional("THINKING_BUDGET")
    if thinking_budget_raw is not None:
        try:
            thinking_budget = int(thinking_budget_raw)
        except ValueError as exc:
            raise ProviderConfigError("THINKING_BUDGET must be an integer") from exc

    settings = ProviderSettings(
        temperature=temperature,
        max_output_tokens=max_output_tokens,
        top_p=top_p,
        json_mode=parse_bool(read_env("JSON_MODE", "false")),
        reasoning_effort=read_optional("REASONING_EFFORT"),
        verbosity=read_optional("VERBOSITY"),
        thinking_budget=thinking_budget,
        include_thoughts=parse_bool(read_env("INCLUDE_THOUGHTS", False)),
    )

    name = provider_name.lower()
    image_model = read_optional("IMAGE_MODEL") or DEFAULT_IMAGE_MODELS.get(name)

    return ProviderConfig(
        name=name,
        api_key=api_key,
        model=model,
        image_model=image_model,
        settings=settings,
    )
