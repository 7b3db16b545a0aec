"""
Infrastructure Components - Logging and metrics

This module provides:
- Prometheus metrics and duration trackers
- Structured logging configuration

License: MIT
"""

from .monitoring import (
    setup_prometheus_metrics,
    embedding_duration_tracker,
    vector_search_duration_tracker,
    llm_generation_duration_tracker,
    record_request,
    record_fallback,
    record_error,
    get_system_metrics,
)
from .logging_config import (
    setup_logging,
    setup_production_logging,
    setup_standard_logging,
    JSONFormatter,
    configure_external_loggers,
)

__all__ = [
    "setup_prometheus_metrics",
    "embedding_duration_tracker",
    "vector_search_duration_tracker",
    "llm_generation_duration_tracker",
    "record_request",
    "record_fallback",
    "record_error",
    "get_system_metrics",
    "setup_logging",
    "setup_production_logging",
    "setup_standard_logging",
    "JSONFormatter",
    "configure_external_loggers",
]
