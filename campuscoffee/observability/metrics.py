"""
Prometheus metrics for CampusCoffee

Counts upserts and queries per outcome and times storage calls.
"""
import os
import time
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()


# =======================
# UPSERT METRICS
# =======================

pos_upserts_total = Counter(
    name="campuscoffee_pos_upserts_total",
    documentation="Total number of POS upserts",
    labelnames=["operation", "status"],  # operation: create, update; status: success, conflict, not_found, error
    registry=REGISTRY,
)

pos_name_conflicts_total = Counter(
    name="campuscoffee_pos_name_conflicts_total",
    documentation="Total number of writes rejected because the POS name was taken",
    registry=REGISTRY,
)

# =======================
# QUERY METRICS
# =======================

pos_queries_total = Counter(
    name="campuscoffee_pos_queries_total",
    documentation="Total number of POS read queries",
    labelnames=["query"],  # query: all, by_id, by_campus
    registry=REGISTRY,
)

# =======================
# STORAGE METRICS
# =======================

pos_storage_duration_seconds = Histogram(
    name="campuscoffee_pos_storage_duration_seconds",
    documentation="Time spent in POS storage calls in seconds",
    labelnames=["operation"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0],
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """Render all metrics in Prometheus text format."""
    return generate_latest(REGISTRY)


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Lazy import: only bind a port when the endpoint is requested
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(pos_storage_duration_seconds, operation="insert"):
            store.insert(pos)
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.start_time: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.perf_counter() - self.start_time
        if self.labels:
            self.histogram.labels(**self.labels).observe(duration)
        else:
            self.histogram.observe(duration)
        return False


def record_upsert(operation: str, status: str) -> None:
    """Count one upsert outcome."""
    pos_upserts_total.labels(operation=operation, status=status).inc()
    if status == "conflict":
        pos_name_conflicts_total.inc()


def record_query(query: str) -> None:
    pos_queries_total.labels(query=query).inc()
