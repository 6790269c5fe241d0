"""Polling loop.

Fixed-delay scheduling: sleep `interval`, run one cycle, repeat. The sleep
does not subtract the cycle's own duration, so a cycle slower than the
interval is followed by the next one after a full interval with no overlap;
the next cycle only starts once `cycle_fn` has returned.

There is no timeout around `cycle_fn`: a stats source that hangs mid-query
stalls every later cycle (unless a query timeout is configured).
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sphinx_exporter.orchestrator.context import RuntimeContext

logger = logging.getLogger(__name__)


def run_loop(ctx: RuntimeContext, *, cycle_fn: Callable[[RuntimeContext], Any], interval: float,
             max_cycles: int | None = None) -> int:
    """Run cycles until shutdown is requested or `max_cycles` have executed.

    Returns the number of executed cycles. Exceptions escaping `cycle_fn` are
    logged and the loop carries on with the next interval.
    """
    logger.info("Starting collection loop interval=%ss", interval)
    if max_cycles is not None:
        logger.info("[loop] Max cycles limit enabled: %s", max_cycles)
    executed_cycles = 0
    try:
        while not ctx.shutdown:
            # Event.wait doubles as an interruptible sleep
            if ctx.stop_event.wait(interval):
                break
            try:
                cycle_fn(ctx)
            except KeyboardInterrupt:
                logger.info("[loop] KeyboardInterrupt received inside cycle; initiating shutdown")
                ctx.request_shutdown()
                break
            except Exception:  # noqa: BLE001
                logger.exception("Cycle execution failed")
            executed_cycles += 1
            if max_cycles is not None and executed_cycles >= max_cycles:
                logger.info("[loop] Reached max cycles (%s) -> terminating", max_cycles)
                break
    except KeyboardInterrupt:
        logger.info("[loop] KeyboardInterrupt (outer) -> graceful shutdown")
    finally:
        logger.info("Collection loop terminated after %d cycle(s)", executed_cycles)
    return executed_cycles


__all__ = ["run_loop"]
