"""Static per-index metric definitions.

`key` matches the stat name reported by `SHOW INDEX <name> STATUS`;
`display_name` is the exported Prometheus metric name.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MetricDefinition:
    key: str
    display_name: str
    description: str


DEFAULT_DEFINITIONS: tuple[MetricDefinition, ...] = (
    MetricDefinition("indexed_documents", "sphinx_indexed_documents", "Number of documents indexed"),
    MetricDefinition("indexed_bytes", "sphinx_indexed_bytes", "Indexed Bytes"),
    MetricDefinition("field_tokens_title", "sphinx_field_tokens_title",
                     "Sums of per-field length titles over the entire index"),
    MetricDefinition("field_tokens_body", "sphinx_field_tokens_body",
                     "Sums of per-field length bodies over the entire index"),
    MetricDefinition("total_tokens", "sphinx_total_tokens", "Total tokens"),
    MetricDefinition("ram_bytes", "sphinx_ram_bytes", "Total size (in bytes) of the RAM-resident index portion"),
    MetricDefinition("disk_bytes", "sphinx_disk_bytes", "Total size (in bytes) of the disk index"),
    MetricDefinition("mem_limit", "sphinx_mem_limit", "Memory limit"),
)

# Unlabeled scalar, not part of the per-index key set.
INDEX_COUNT = MetricDefinition("index_count", "sphinx_index_count", "Number of indexes")

INDEX_LABEL = "index"

__all__ = ["MetricDefinition", "DEFAULT_DEFINITIONS", "INDEX_COUNT", "INDEX_LABEL"]
