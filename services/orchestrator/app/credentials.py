"""Credential availability checks run before provider-dependent phases."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from genius_creator_providers import ProviderConfigError

from .models import ProviderOverride
from .providers import resolve_provider_config

logger = logging.getLogger(__name__)


class CredentialProbe(ABC):
    """Answers whether the provider can be called, optionally acquiring a key."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Return ``True`` when a usable credential is present."""

    async def acquire(self) -> bool:
        """Try to obtain a credential interactively; non-interactive probes cannot."""

        return False


class ProviderCredentialProbe(CredentialProbe):
    """Checks that the configured provider resolves to a non-empty API key."""

    def __init__(self, override: ProviderOverride | None = None) -> None:
        self._override = override

    async def is_available(self) -> bool:
        try:
            config = resolve_provider_config(self._override)
        except ProviderConfigError as exc:
            logger.warning("Provider credentials unavailable", extra={"reason": str(exc)})
            return False
        return bool(config.api_key)
