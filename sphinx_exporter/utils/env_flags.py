"""Environment flag helpers.

Boolean settings use the canonical truthy set {"1","true","yes","on"} and
falsy set {"0","false","no","off"} (case-insensitive). Every CLI flag has an
environment fallback named by `env_name`:

    env_name('listen-port') -> 'SPHINX_EXPORTER_LISTEN_PORT'
"""
from __future__ import annotations

TRUTHY_SET: set[str] = {"1","true","yes","on"}
FALSY_SET: set[str] = {"0","false","no","off"}

ENV_PREFIX = "SPHINX_EXPORTER_"

def env_name(flag: str) -> str:
    return ENV_PREFIX + flag.replace('-', '_').upper()

def parse_bool(value: str) -> bool | None:
    """Returns None for values outside both truthy and falsy sets."""
    s = value.strip().lower()
    if s in TRUTHY_SET:
        return True
    if s in FALSY_SET:
        return False
    return None

__all__ = [
    'TRUTHY_SET',
    'FALSY_SET',
    'ENV_PREFIX',
    'env_name',
    'parse_bool',
]
