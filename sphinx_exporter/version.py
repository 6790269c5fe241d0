"""Exporter version lookup.

get_version() prefers, in order:
1. SPHINX_EXPORTER_VERSION from the environment (CI / image builds)
2. the installed `sphinx-exporter` distribution metadata
3. __version__ below, for source checkouts that were never installed

The result feeds `sphinx_exporter_build_info{version=...}` and `--version`.
"""
from __future__ import annotations

import os
from importlib import metadata

__version__ = "0.3.0"

DISTRIBUTION = "sphinx-exporter"


def get_version() -> str:
    override = os.environ.get("SPHINX_EXPORTER_VERSION", "").strip()
    if override:
        return override
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return __version__


__all__ = ["__version__", "DISTRIBUTION", "get_version"]
