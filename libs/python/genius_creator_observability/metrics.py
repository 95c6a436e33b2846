"""Prometheus metrics helpers and middleware."""

from __future__ import annotations

from time import perf_counter
from typing import TYPE_CHECKING, Optional, Union

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from genius_creator_providers.base import ImageResponse, ProviderResponse


_HTTP_REQUEST_COUNT = Counter(
    "genius_creator_http_requests_total",
    "Total HTTP requests processed by service",
    labelnames=("service", "method", "route", "status"),
)

_HTTP_REQUEST_LATENCY = Histogram(
    "genius_creator_http_request_duration_seconds",
    "Latency of HTTP requests",
    labelnames=("service", "method", "route"),
)

_STAGE_DURATION = Histogram(
    "genius_creator_stage_duration_seconds",
    "Duration of generation stages",
    labelnames=("service", "stage"),
)

_STAGE_COUNTER = Counter(
    "genius_creator_stage_runs_total",
    "Count of stage executions by outcome",
    labelnames=("service", "stage", "status"),
)

_UNIT_OUTCOMES = Counter(
    "genius_creator_unit_outcomes_total",
    "Chapter and cover units by outcome (ok or degraded)",
    labelnames=("service", "unit", "outcome"),
)

_LLM_TOKENS = Counter(
    "genius_creator_llm_tokens_total",
    "Token usage by provider and stage",
    labelnames=("service", "stage", "provider", "token_type"),
)

_LLM_COST = Counter(
    "genius_creator_llm_cost_usd_total",
    "Aggregated LLM cost in USD",
    labelnames=("service", "stage", "provider"),
)

_LLM_LATENCY = Histogram(
    "genius_creator_llm_latency_seconds",
    "Latency of LLM provider calls",
    labelnames=("service", "stage", "provider"),
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect request metrics for FastAPI services."""

    def __init__(self, app: FastAPI, service_name: str) -> None:
        super().__init__(app)
        self.service_name = service_name

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        start = perf_counter()
        response = await call_next(request)
        elapsed = perf_counter() - start

        route_template = request.url.path
        route = request.scope.get("route")
        if route and getattr(route, "path", None):
            route_template = route.path  # type: ignore[assignment]

        method = request.method
        status = getattr(response, "status_code", 500)

        _HTTP_REQUEST_COUNT.labels(self.service_name, method, route_template, str(status)).inc()
        _HTTP_REQUEST_LATENCY.labels(self.service_name, method, route_template).observe(elapsed)
        return response


def setup_fastapi_metrics(app: FastAPI, service_name: str, endpoint: str = "/metrics") -> None:
    """Register Prometheus middleware and metrics endpoint for a FastAPI app."""

    if getattr(app.state, "metrics_configured", False):
        return

    app.add_middleware(PrometheusMiddleware, service_name=service_name)

    @app.get(endpoint, include_in_schema=False)
    async def _metrics_endpoint() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.state.metrics_configured = True


def observe_stage_duration(
    stage: str,
    duration_seconds: float,
    *,
    service_name: str,
    status: str = "success",
) -> None:
    """Record metrics for stage execution duration and outcome."""

    _STAGE_DURATION.labels(service_name, stage).observe(max(duration_seconds, 0.0))
    _STAGE_COUNTER.labels(service_name, stage, status).inc()


def observe_unit_outcome(unit: str, *, degraded: bool, service_name: str) -> None:
    """Count a finished chapter or cover unit."""

    _UNIT_OUTCOMES.labels(service_name, unit, "degraded" if degraded else "ok").inc()


def observe_provider_response(
    *,
    stage: str,
    provider: str,
    service_name: str,
    response: Optional[Union["ProviderResponse", "ImageResponse"]],
) -> None:
    """Capture token usage, latency, and cost from provider responses."""

    if response is None:
        return

    prompt_tokens = getattr(response, "prompt_tokens", None)
    if isinstance(prompt_tokens, (int, float)) and prompt_tokens >= 0:
        _LLM_TOKENS.labels(service_name, stage, provider, "prompt").inc(prompt_tokens)

    completion_tokens = getattr(response, "completion_tokens", None)
    if isinstance(completion_tokens, (int, float)) and completion_tokens >= 0:
        _LLM_TOKENS.labels(service_name, stage, provider, "completion").inc(completion_tokens)

    latency_ms = getattr(response, "latency_ms", None)
    if isinstance(latency_ms, (int, float)) and latency_ms >= 0:
        _LLM_LATENCY.labels(service_name, stage, provider).observe(latency_ms / 1000)

    cost_usd = getattr(response, "cost_usd", None)
    if isinstance(cost_usd, (int, float)) and cost_usd >= 0:
        _LLM_COST.labels(service_name, stage, provider).inc(cost_usd)
