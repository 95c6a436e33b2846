"""Lightweight caching layer for provider text responses."""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import os
import time
from typing import Any, Callable, Dict, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from genius_creator_providers import ProviderConfig
from genius_creator_providers.base import LLMProvider, ProviderRequest, ProviderResponse

logger = logging.getLogger(__name__)


class StageCache:
    """Cache provider responses in Redis when ``REDIS_URL`` is set, in memory otherwise.

    A TTL of zero disables caching. A response is stored only when ``accept``
    approves it, so payloads the caller later rejects are asked for again.
    """

    def __init__(self, ttl_seconds: int | None = None, redis_url: str | None = None) -> None:
        if ttl_seconds is None:
            ttl_seconds = int(os.getenv("LLM_CACHE_TTL_SECONDS", "900"))
        self._ttl_seconds = max(ttl_seconds, 0)
        redis_url = redis_url if redis_url is not None else os.getenv("REDIS_URL")
        self._redis: Optional[Redis] = (
            Redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
            if redis_url
            else None
        )
        self._local: Dict[str, tuple[dict[str, Any], float]] = {}
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self._ttl_seconds > 0

    async def generate(
        self,
        provider_config: ProviderConfig,
        provider: LLMProvider,
        request: ProviderRequest,
        stage_name: str,
        accept: Callable[[ProviderResponse], bool] | None = None,
    ) -> ProviderResponse:
        if not self.enabled:
            return await provider.generate(request)

        cache_key = self._build_key(provider_config, request, stage_name)
        cached = await self._get(cache_key)
        if cached is not None:
            logger.debug("Provider cache hit", extra={"unit": stage_name})
            return self._decode_response(cached)

        response = await provider.generate(request)
        if (accept or _has_text)(response):
            await self._set(cache_key, self._encode_response(response))
        return response

    async def _get(self, key: str) -> Optional[dict[str, Any]]:
        if self._redis is not None:
            try:
                payload = await self._redis.get(key)
            except RedisError:
                logger.warning("Redis read failed; using local cache", exc_info=True)
            else:
                return json.loads(payload) if payload else None
        async with self._lock:
            entry = self._local.get(key)
            if not entry:
                return None
            value, expires_at = entry
            if expires_at < time.time():
                self._local.pop(key, None)
                return None
            return value

    async def _set(self, key: str, value: dict[str, Any]) -> None:
        if self._redis is not None:
            try:
                await self._redis.set(key, json.dumps(value, ensure_ascii=False), ex=self._ttl_seconds)
                return
            except RedisError:
                logger.warning("Redis write failed; using local cache", exc_info=True)
        async with self._lock:
            now = time.time()
            expired = [name for name, (_, expires_at) in self._local.items() if expires_at < now]
            for name in expired:
                del self._local[name]
            self._local[key] = (value, now + self._ttl_seconds)

    @staticmethod
    def _hash_text(text: str) -> str:
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    def _build_key(
        self,
        provider_config: ProviderConfig,
        request: ProviderRequest,
        stage_name: str,
    ) -> str:
        payload: dict[str, Any] = {
            "provider": provider_config.name,
            "model": provider_config.model,
            "stage": stage_name,
            "prompt": request.prompt,
            "system": request.system_prompt,
            "json_schema": request.json_schema,
            "temperature": request.temperature,
            "max_output_tokens": request.max_output_tokens,
            "top_p": request.top_p,
            "reasoning_effort": request.reasoning_effort,
            "verbosity": request.verbosity,
            "thinking_budget": request.thinking_budget,
            "include_thoughts": request.include_thoughts,
        }
        serialised = json.dumps(payload, sort_keys=True, ensure_ascii=False, default=str)
        return "genius-creator:" + self._hash_text(serialised)

    def _encode_response(self, response: ProviderResponse) -> dict[str, Any]:
        return {
            "text": response.text,
            "model": response.model,
            "prompt_tokens": response.prompt_tokens,
            "completion_tokens": response.completion_tokens,
            "cost_usd": response.cost_usd,
            "latency_ms": response.latency_ms,
        }

    def _decode_response(self, payload: dict[str, Any]) -> ProviderResponse:
        # Cached hits cost nothing; report zero so metrics are not double counted.
        return ProviderResponse(
            text=payload.get("text", ""),
            raw={"cached": True},
            model=payload.get("model", "unknown"),
            prompt_tokens=0,
            completion_tokens=0,
            cost_usd=0.0,
            latency_ms=0.0,
        )


def _has_text(response: ProviderResponse) -> bool:
    return bool(response.text.strip())


__all__ = ["StageCache"]
