"""
Monitoring - Prometheus metrics for retrieval and generation

Metrics are created lazily by setup_prometheus_metrics(); every recorder in
this module is a no-op until then.

License: MIT
"""

from typing import Dict, Any
import time
import logging
from contextlib import contextmanager

from prometheus_client import Counter, Histogram, Gauge, REGISTRY

logger = logging.getLogger(__name__)

# Prometheus metrics (initialized lazily)
_metrics_initialized = False
REQUEST_COUNT = None
REQUEST_DURATION = None
EMBEDDING_DURATION = None
VECTOR_SEARCH_DURATION = None
LLM_GENERATION_DURATION = None
RAG_FALLBACKS = None
DOCUMENT_SEARCH_FAILURES = None
DOCUMENTS_INDEXED = None
ERROR_COUNT = None


def setup_prometheus_metrics() -> None:
    """Initialize Prometheus metrics for the service."""
    global _metrics_initialized
    global REQUEST_COUNT, REQUEST_DURATION
    global EMBEDDING_DURATION, VECTOR_SEARCH_DURATION, LLM_GENERATION_DURATION
    global RAG_FALLBACKS, DOCUMENT_SEARCH_FAILURES, DOCUMENTS_INDEXED, ERROR_COUNT

    if _metrics_initialized:
        return

    # HTTP request metrics
    REQUEST_COUNT = Counter(
        "category_rag_http_requests_total",
        "Total HTTP requests",
        ["method", "endpoint", "status_code"],
    )

    REQUEST_DURATION = Histogram(
        "category_rag_http_request_duration_seconds", "HTTP request duration in seconds"
    )

    # Retrieval metrics
    EMBEDDING_DURATION = Histogram(
        "category_rag_embedding_duration_seconds",
        "Embedding provider call duration in seconds",
        ["operation"],
    )

    VECTOR_SEARCH_DURATION = Histogram(
        "category_rag_vector_search_duration_seconds",
        "Vector search duration in seconds",
        ["backend"],
    )

    LLM_GENERATION_DURATION = Histogram(
        "category_rag_llm_generation_duration_seconds",
        "LLM generation duration in seconds",
        ["model"],
    )

    RAG_FALLBACKS = Counter(
        "category_rag_fallbacks_total",
        "Content served positionally instead of semantically",
        ["reason"],
    )

    DOCUMENT_SEARCH_FAILURES = Counter(
        "category_rag_document_search_failures_total",
        "Per-document failures inside a category search",
    )

    DOCUMENTS_INDEXED = Gauge(
        "category_rag_documents", "Documents registered in the category store"
    )

    ERROR_COUNT = Counter(
        "category_rag_errors_total", "Total errors", ["error_type", "component"]
    )

    _metrics_initialized = True
    logger.info("Prometheus metrics initialized")


@contextmanager
def embedding_duration_tracker(operation: str = "batch"):
    """
    Context manager to track embedding provider duration.

    Args:
        operation: 'batch' or 'query'
    """
    start_time = time.time()
    try:
        yield
    finally:
        duration = time.time() - start_time
        if EMBEDDING_DURATION:
            EMBEDDING_DURATION.labels(operation=operation).observe(duration)


@contextmanager
def vector_search_duration_tracker(backend: str = "memory"):
    """Context manager to track vector search duration."""
    start_time = time.time()
    try:
        yield
    finally:
        duration = time.time() - start_time
        if VECTOR_SEARCH_DURATION:
            VECTOR_SEARCH_DURATION.labels(backend=backend).observe(duration)


@contextmanager
def llm_generation_duration_tracker(model: str = "unknown"):
    """
    Context manager to track LLM generation duration.

    Args:
        model: Model name for labeling
    """
    start_time = time.time()
    try:
        yield
    finally:
        duration = time.time() - start_time
        if LLM_GENERATION_DURATION:
            LLM_GENERATION_DURATION.labels(model=model).observe(duration)


def record_request(method: str, endpoint: str, status_code: int, duration: float) -> None:
    """Record one served HTTP request."""
    if REQUEST_COUNT:
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=status_code).inc()
    if REQUEST_DURATION:
        REQUEST_DURATION.observe(duration)


def record_fallback(reason: str) -> None:
    """
    Record content falling back to positional retrieval.

    Args:
        reason: 'below_threshold', 'init_failed' or 'search_failed'
    """
    if RAG_FALLBACKS:
        RAG_FALLBACKS.labels(reason=reason).inc()


def record_document_search_failure() -> None:
    """Record one document failing inside a category fan-out."""
    if DOCUMENT_SEARCH_FAILURES:
        DOCUMENT_SEARCH_FAILURES.inc()


def set_document_count(count: int) -> None:
    if DOCUMENTS_INDEXED:
        DOCUMENTS_INDEXED.set(count)


def record_error(error_type: str, component: str) -> None:
    """
    Record an error occurrence.

    Args:
        error_type: Type of error (e.g., 'ProviderFailure', 'NotFound')
        component: Component where error occurred (e.g., 'embedding', 'api')
    """
    if ERROR_COUNT:
        ERROR_COUNT.labels(error_type=error_type, component=component).inc()


def get_system_metrics() -> Dict[str, Any]:
    """
    Summarize the service's registered metric families.

    Returns:
        Dictionary keyed by metric family name
    """
    metrics: Dict[str, Any] = {"timestamp": time.time(), "initialized": _metrics_initialized}

    if _metrics_initialized:
        families = {}
        for family in REGISTRY.collect():
            if family.name.startswith("category_rag_"):
                families[family.name] = {
                    "type": family.type,
                    "help": family.documentation,
                    "samples": len(family.samples),
                }
        metrics["prometheus_metrics"] = families

    return metrics
