"""Metrics server bootstrap.

Starts the Prometheus HTTP exposition endpoint for an `IndexMetricsRegistry`.
prometheus_client serves `/metrics` (and `/`) from a daemon thread; the
returned thread handle lets the process entry detect a crashed listener.

Public API:
  setup_metrics_server(metrics, port, host) -> (server, thread)
"""
from __future__ import annotations

import logging
import threading
from typing import Any

from prometheus_client import start_http_server  # type: ignore

from .registry import IndexMetricsRegistry

logger = logging.getLogger(__name__)


def setup_metrics_server(metrics: IndexMetricsRegistry, port: int = 9247,
                         host: str = "0.0.0.0") -> tuple[Any, threading.Thread]:
    """Bind the exposition endpoint and serve `metrics` in a background thread.

    Raises OSError when the port cannot be bound; callers treat that as fatal.
    """
    server, thread = start_http_server(port, addr=host, registry=metrics.collector_registry)
    logger.info("Metrics server started on %s:%s", host, port)
    logger.info("Metrics available at http://%s:%s/metrics", host, port)
    return server, thread


__all__ = ["setup_metrics_server"]
