"""Prometheus exporter for Sphinx / Manticore per-index statistics."""

from .version import __version__, get_version

__all__ = ["__version__", "get_version"]
