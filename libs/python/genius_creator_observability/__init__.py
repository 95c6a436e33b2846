"""Shared observability helpers used across GeniusCreator services."""

from .logging import log_context, setup_logging
from .metrics import (
    observe_provider_response,
    observe_stage_duration,
    observe_unit_outcome,
    setup_fastapi_metrics,
)

__all__ = [
    "setup_logging",
    "log_context",
    "setup_fastapi_metrics",
    "observe_provider_response",
    "observe_stage_duration",
    "observe_unit_outcome",
]
