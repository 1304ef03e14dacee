"""
Middleware Package

Contains FastAPI middleware for:
- Prometheus metrics collection
"""

from hirewise.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    REQUEST_LATENCY,
    REQUEST_COUNT,
    ACTIVE_REQUESTS,
    PARSING_JOB_TRANSITIONS,
    MATCH_SUMMARIES,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "REQUEST_LATENCY",
    "REQUEST_COUNT",
    "ACTIVE_REQUESTS",
    "PARSING_JOB_TRANSITIONS",
    "MATCH_SUMMARIES",
]
