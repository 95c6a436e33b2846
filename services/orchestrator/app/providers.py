"""Utilities for working with provider configurations inside the orchestrator."""

from __future__ import annotations

import os

from genius_creator_providers import ProviderConfig, ProviderSettings, load_provider_config
from genius_creator_providers.config import PROVIDER_ENV_VAR

from .models import ProviderOverride

_SETTINGS_FIELDS = (
    "temperature",
    "max_output_tokens",
    "top_p",
    "json_mode",
    "reasoning_effort",
    "verbosity",
    "thinking_budget",
    "include_thoughts",
)


def resolve_provider_config(override: ProviderOverride | None = None) -> ProviderConfig:
    """Build the provider config from the environment, then apply ``override``.

    Raises:
        ProviderConfigError: When a real provider is selected without credentials.
    """

    provider_name = (
        override.name if override and override.name else os.getenv(PROVIDER_ENV_VAR, "mock")
    )

    if provider_name and provider_name.lower() == "mock":
        return ProviderConfig(
            name="mock",
            api_key="mock",
            model="mock",
            image_model="mock",
            settings=ProviderSettings(),
        )

    config = load_provider_config(prefix=provider_name)

    if override is None:
        return config

    update_kwargs = {}
    if override.model:
        update_kwargs["model"] = override.model
    if override.image_model:
        update_kwargs["image_model"] = override.image_model

    settings_updates = {
        name: getattr(override, name)
        for name in _SETTINGS_FIELDS
        if getattr(override, name) is not None
    }
    if settings_updates:
        update_kwargs["settings"] = config.settings.model_copy(update=settings_updates)

    if update_kwargs:
        config = config.model_copy(update=update_kwargs)

    return config
