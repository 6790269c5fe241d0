"""Metrics package public interface.

Stable import surfaces:
    from sphinx_exporter.metrics import IndexMetricsRegistry, setup_metrics_server
    from sphinx_exporter.metrics.definitions import DEFAULT_DEFINITIONS
"""
from __future__ import annotations

from .definitions import DEFAULT_DEFINITIONS, INDEX_COUNT, MetricDefinition
from .registry import IndexMetricsRegistry, build_default_registry
from .server import setup_metrics_server

__all__ = [
    "DEFAULT_DEFINITIONS",
    "INDEX_COUNT",
    "MetricDefinition",
    "IndexMetricsRegistry",
    "build_default_registry",
    "setup_metrics_server",
]
