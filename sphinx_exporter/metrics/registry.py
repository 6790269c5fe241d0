"""Per-index metric registry.

`IndexMetricsRegistry` owns a prometheus_client `CollectorRegistry` plus one
labelled Gauge per registered metric key. It is constructed once at startup
and handed to both the collection cycle (sole writer) and the HTTP exposition
server (reader). prometheus_client guards every child value with its own
lock, so scrapes can run while a cycle is writing; a scrape taken mid-cycle
may mix values from two cycles.

Absence of a (key, index) child means "never observed" and is distinct from
an explicit zero: `get_value` returns None for the former.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from prometheus_client import CollectorRegistry, Counter, Gauge  # type: ignore

from sphinx_exporter.utils.exceptions import DuplicateMetricError
from sphinx_exporter.version import get_version

from .definitions import DEFAULT_DEFINITIONS, INDEX_COUNT, INDEX_LABEL, MetricDefinition

logger = logging.getLogger(__name__)

ERROR_KINDS = ('connection', 'query', 'parse', 'unknown')


class IndexMetricsRegistry:
    def __init__(self, registry: CollectorRegistry | None = None, *, namespace: str = "sphinx_exporter") -> None:
        self.collector_registry = registry if registry is not None else CollectorRegistry()
        self._gauges: dict[str, Gauge] = {}
        self._definitions: dict[str, MetricDefinition] = {}
        self.index_count = Gauge(
            INDEX_COUNT.display_name,
            INDEX_COUNT.description,
            registry=self.collector_registry,
        )
        self._init_self_metrics(namespace)

    def _init_self_metrics(self, ns: str) -> None:
        reg = self.collector_registry
        self.cycles = Counter(f"{ns}_cycles", "Collection cycles executed", registry=reg)
        self._cycle_errors_name = f"{ns}_cycle_errors"
        self.cycle_errors = Counter(
            self._cycle_errors_name,
            "Collection cycles that ended early, by error kind",
            ["kind"],
            registry=reg,
        )
        # Zero-sample series so dashboards see every kind before the first failure
        for kind in ERROR_KINDS:
            self.cycle_errors.labels(kind=kind)
        self.cycle_duration = Gauge(
            f"{ns}_cycle_duration_seconds", "Wall time of the most recent collection cycle", registry=reg,
        )
        self.last_success = Gauge(
            f"{ns}_last_success_timestamp_seconds",
            "Unix time of the last cycle that completed without error",
            registry=reg,
        )
        self.stale_zeroed = Counter(
            f"{ns}_stale_indexes_zeroed", "Indexes zeroed after disappearing from the source", registry=reg,
        )
        self.build_info = Gauge(
            f"{ns}_build_info", "Exporter build information (value always 1)", ["version"], registry=reg,
        )
        self.build_info.labels(version=get_version()).set(1)

    # ------------------------------------------------------------------
    # Per-index metrics
    # ------------------------------------------------------------------
    def register(self, key: str, display_name: str, description: str) -> Gauge:
        if key in self._gauges:
            raise DuplicateMetricError(f"metric key {key!r} already registered")
        gauge = Gauge(display_name, description, [INDEX_LABEL], registry=self.collector_registry)
        self._gauges[key] = gauge
        self._definitions[key] = MetricDefinition(key, display_name, description)
        return gauge

    def register_all(self, definitions: Iterable[MetricDefinition]) -> None:
        for d in definitions:
            self.register(d.key, d.display_name, d.description)

    def is_known(self, key: str) -> bool:
        return key in self._gauges

    def all_keys(self) -> set[str]:
        return set(self._gauges)

    def set_value(self, key: str, index_name: str, value: float) -> None:
        self._gauges[key].labels(**{INDEX_LABEL: index_name}).set(value)

    def zero(self, key: str, index_name: str) -> None:
        self.set_value(key, index_name, 0.0)

    def get_value(self, key: str, index_name: str) -> float | None:
        d = self._definitions[key]
        return self.collector_registry.get_sample_value(d.display_name, {INDEX_LABEL: index_name})

    def set_index_count(self, count: int) -> None:
        self.index_count.set(count)

    def get_index_count(self) -> float | None:
        return self.collector_registry.get_sample_value(INDEX_COUNT.display_name)

    # ------------------------------------------------------------------
    # Exporter self-metrics
    # ------------------------------------------------------------------
    def record_cycle(self, duration: float, error_kind: str | None = None) -> None:
        self.cycles.inc()
        self.cycle_duration.set(duration)
        if error_kind is None:
            self.last_success.set(time.time())
        else:
            self.cycle_errors.labels(kind=error_kind).inc()

    def record_zeroed(self, count: int) -> None:
        if count:
            self.stale_zeroed.inc(count)

    def error_count(self, kind: str) -> float:
        val = self.collector_registry.get_sample_value(
            self._cycle_errors_name + "_total", {"kind": kind},
        )
        return val or 0.0


def build_default_registry(registry: CollectorRegistry | None = None) -> IndexMetricsRegistry:
    """Construct a registry with the fixed Sphinx metric set registered."""
    reg = IndexMetricsRegistry(registry)
    reg.register_all(DEFAULT_DEFINITIONS)
    logger.debug("Registered %d per-index metrics", len(DEFAULT_DEFINITIONS))
    return reg


__all__ = ["IndexMetricsRegistry", "build_default_registry", "ERROR_KINDS"]
