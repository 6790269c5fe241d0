"""Pytest configuration & shared fixtures for sphinx-exporter.

Responsibilities:
1. Ensure project root on sys.path.
2. Provide an isolated metrics registry per test (own CollectorRegistry).
3. Provide a scripted fake stats source that plays back one plan per cycle.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sphinx_exporter.metrics.registry import build_default_registry  # noqa: E402
from sphinx_exporter.orchestrator.context import RuntimeContext  # noqa: E402
from sphinx_exporter.orchestrator.reconciler import Reconciler  # noqa: E402
from sphinx_exporter.utils.exceptions import SourceConnectionError  # noqa: E402


class FakeConnection:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeSource:
    """Stats source double driven by a list of per-cycle plans.

    A plan is either an Exception instance (raised from connect) or a dict
    mapping index name -> list of (stat, value) rows, or -> an Exception
    raised when that index's stats are fetched. A plan dict may also carry
    the special key '__list_error__' to fail the listing query.
    """

    def __init__(self, plans: list) -> None:
        self.plans = list(plans)
        self.current: object = None
        self.connections: list[FakeConnection] = []
        self.fetched: list[str] = []

    def connect(self) -> FakeConnection:
        self.current = self.plans.pop(0)
        if isinstance(self.current, BaseException):
            raise self.current
        conn = FakeConnection()
        self.connections.append(conn)
        return conn

    def list_indexes(self, conn):
        assert not conn.closed
        plan = self.current
        if '__list_error__' in plan:
            raise plan['__list_error__']
        return [(name, 'rt') for name in plan]

    def fetch_index_stats(self, conn, index_name):
        assert not conn.closed
        self.fetched.append(index_name)
        rows = self.current[index_name]
        if isinstance(rows, BaseException):
            raise rows
        return list(rows)


@pytest.fixture()
def metrics():
    return build_default_registry()


@pytest.fixture()
def make_ctx(metrics):
    def _make(plans: list, *, zero_on_outage: bool = False) -> RuntimeContext:
        return RuntimeContext(
            metrics=metrics,
            reconciler=Reconciler(metrics, zero_on_outage=zero_on_outage),
            source=FakeSource(plans),
        )
    return _make


@pytest.fixture()
def unreachable():
    return SourceConnectionError("cannot connect to 127.0.0.1:9306: refused", SourceConnectionError.UNREACHABLE)
