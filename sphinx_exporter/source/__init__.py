"""Stats source access (Sphinx / Manticore SQL interface)."""
from __future__ import annotations

from .client import SphinxClient, parse_stat_value, validate_index_name

__all__ = ["SphinxClient", "parse_stat_value", "validate_index_name"]
