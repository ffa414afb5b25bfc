"""Execution-context logging helpers.

Caller attribution for structlog events, a scoped performance tracker and
wrap-and-measure timers, plus the logging setup and request-context middleware
used by the API.
"""

from app.observability.caller import CallerContext, CallSiteInfo, capture_call_site, resolve_caller, resolve_full_trace
from app.observability.enrichment import EnricherConfig, ExecutionContextEnricher, StaticPropertiesAdder
from app.observability.performance import (
    ExecutionOutcome,
    PerformanceTracker,
    log_execution_time,
    log_execution_time_async,
    measure_execution,
    track_performance,
)

__all__ = [
    "CallSiteInfo",
    "CallerContext",
    "EnricherConfig",
    "ExecutionContextEnricher",
    "ExecutionOutcome",
    "PerformanceTracker",
    "StaticPropertiesAdder",
    "capture_call_site",
    "log_execution_time",
    "log_execution_time_async",
    "measure_execution",
    "resolve_caller",
    "resolve_full_trace",
    "track_performance",
]
