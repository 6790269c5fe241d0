"""Runtime context container for the exporter.

Centralizes the long-lived objects shared by the collection loop and the
process entry instead of module-level singletons.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any

from sphinx_exporter.metrics.registry import IndexMetricsRegistry
from sphinx_exporter.orchestrator.reconciler import Reconciler


@dataclass(slots=True)
class RuntimeContext:
    metrics: IndexMetricsRegistry
    reconciler: Reconciler
    source: Any  # SphinxClient or any object with the same three methods
    config: Any | None = None
    start_time: float = field(default_factory=time.time)
    cycle_count: int = 0
    last_result: Any | None = None
    # Cooperative shutdown; set() wakes the loop out of its sleep
    stop_event: threading.Event = field(default_factory=threading.Event)

    @property
    def shutdown(self) -> bool:
        return self.stop_event.is_set()

    def request_shutdown(self) -> None:
        self.stop_event.set()

__all__ = ["RuntimeContext"]
