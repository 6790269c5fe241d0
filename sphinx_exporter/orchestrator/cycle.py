"""Single collection cycle.

One call performs discover -> fetch -> reconcile against the stats source:

  1. connect (per-cycle connection, always closed on exit)
  2. SHOW TABLES
  3. for each index: SHOW INDEX <name> STATUS, set every known stat
  4. reconcile vanished indexes, set sphinx_index_count

Any connection, query or parse error is logged once, counted by kind and
ends the collect phase; values already written in this cycle stay. Anything
else is logged with its traceback and counted as kind "unknown"; the
cycle still reconciles and records itself.
"""
from __future__ import annotations

import contextlib
import logging
import time
from dataclasses import dataclass, field

from sphinx_exporter.orchestrator.context import RuntimeContext
from sphinx_exporter.source.client import parse_stat_value
from sphinx_exporter.utils.exceptions import (
    ExporterError,
    SourceConnectionError,
    UnsafeIdentifierError,
    classify_exception,
)

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    observed: set[str] = field(default_factory=set)
    enumerated: set[str] | None = None
    zeroed: set[str] = field(default_factory=set)
    skipped: set[str] = field(default_factory=set)
    error: Exception | None = None
    reconciled: bool = False
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


def _apply_stats(ctx: RuntimeContext, index_name: str, rows: list[tuple[str, str]]) -> int:
    """Set every known stat for `index_name`; unknown names are ignored."""
    applied = 0
    for stat_name, raw in rows:
        if not ctx.metrics.is_known(stat_name):
            continue
        value = parse_stat_value(raw, stat_name, index_name)
        ctx.metrics.set_value(stat_name, index_name, value)
        applied += 1
    return applied


def _collect(ctx: RuntimeContext, result: CycleResult) -> None:
    source = ctx.source
    with contextlib.closing(source.connect()) as conn:
        listing = source.list_indexes(conn)
        enumerated = {name for name, _kind in listing}
        result.enumerated = enumerated
        for index_name, kind in listing:
            try:
                rows = source.fetch_index_stats(conn, index_name)
            except UnsafeIdentifierError as e:
                logger.warning("Skipping index: %s", e)
                enumerated.discard(index_name)
                result.skipped.add(index_name)
                continue
            # Observed once its stats arrived, even if a value below fails to parse
            result.observed.add(index_name)
            n = _apply_stats(ctx, index_name, rows)
            logger.debug("index=%s type=%s stats_applied=%d", index_name, kind, n)


def run_cycle(ctx: RuntimeContext) -> CycleResult:
    """Execute one cycle and return its outcome; errors are recorded on the result, not raised."""
    start = time.monotonic()
    result = CycleResult()
    try:
        _collect(ctx, result)
    except SourceConnectionError as e:
        result.error = e
        logger.error("Cycle %d: stats source connection failed: %s", ctx.cycle_count + 1, e)
    except ExporterError as e:
        result.error = e
        logger.error("Cycle %d aborted after %d index(es): %s", ctx.cycle_count + 1, len(result.observed), e)
    except Exception as e:  # noqa: BLE001
        result.error = e
        logger.exception("Cycle %d failed with unexpected error after %d index(es)",
                         ctx.cycle_count + 1, len(result.observed))

    if result.enumerated is None:
        result.zeroed = ctx.reconciler.reconcile_outage()
        result.reconciled = ctx.reconciler.zero_on_outage
        if result.reconciled:
            ctx.metrics.set_index_count(0)
    else:
        result.zeroed = ctx.reconciler.reconcile(result.observed, result.enumerated)
        result.reconciled = True
        ctx.metrics.set_index_count(len(result.enumerated))

    result.duration = time.monotonic() - start
    ctx.cycle_count += 1
    ctx.last_result = result
    ctx.metrics.record_cycle(
        result.duration, None if result.error is None else classify_exception(result.error),
    )
    logger.debug(
        "Cycle %d done in %.3fs observed=%d zeroed=%d ok=%s",
        ctx.cycle_count, result.duration, len(result.observed), len(result.zeroed), result.ok,
    )
    return result


__all__ = ["CycleResult", "run_cycle"]
