"""Stale-index reconciliation.

A pull-based endpoint has no notion of a deleted index: without this step
the last values of a dropped index would be exported forever. After every
cycle the Reconciler compares the previously observed IndexSet with what the
current cycle saw, zeroes every registered metric for indexes that are gone,
and then swaps in the new set.

Inputs per cycle:
  observed    indexes whose stats were fetched this cycle
  enumerated  names returned by the listing query, or None when the cycle
              never got that far (connection/listing failure)

Rules:
  * enumerated is None (outage): skipped unless `zero_on_outage`, in which
    case the cycle is treated as "no indexes exist".
  * otherwise an index is gone when it is absent from both observed and
    enumerated. Listed-but-unreached indexes (partial abort) keep their
    last values and remain tracked.

The Reconciler is the only writer of the stored set; replacement is a single
reference assignment so readers never see a half-built set.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from sphinx_exporter.metrics.registry import IndexMetricsRegistry

logger = logging.getLogger(__name__)


class Reconciler:
    def __init__(self, metrics: IndexMetricsRegistry, *, zero_on_outage: bool = False) -> None:
        self.metrics = metrics
        self.zero_on_outage = zero_on_outage
        self._previous: frozenset[str] = frozenset()

    @property
    def previous(self) -> frozenset[str]:
        return self._previous

    def stale_indexes(self, present: Iterable[str]) -> set[str]:
        return set(self._previous.difference(present))

    def reconcile(self, observed: Iterable[str], enumerated: Iterable[str] | None = None) -> set[str]:
        """Zero metrics for indexes that dropped out and store the new set.

        Returns the names zeroed by this call. With `enumerated` omitted the
        observed set is taken as the complete listing.
        """
        observed_set = frozenset(observed)
        if enumerated is None:
            present = observed_set
        else:
            enumerated_set = frozenset(enumerated)
            # Listed but not reached this cycle: still present, keep tracking
            present = observed_set | (self._previous & enumerated_set)
        stale = self.stale_indexes(present)
        if stale:
            keys = sorted(self.metrics.all_keys())
            for index_name in sorted(stale):
                for key in keys:
                    self.metrics.zero(key, index_name)
            logger.info("Zeroed metrics for %d vanished index(es): %s", len(stale), ", ".join(sorted(stale)))
            self.metrics.record_zeroed(len(stale))
        self._previous = present
        return stale

    def reconcile_outage(self) -> set[str]:
        """Handle a cycle that enumerated nothing because the source was unavailable."""
        if not self.zero_on_outage:
            logger.debug("Source unavailable; retaining %d known index(es) untouched", len(self._previous))
            return set()
        return self.reconcile(())


__all__ = ["Reconciler"]
