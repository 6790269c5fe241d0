"""Runtime configuration consolidation.

Provides a typed, frozen snapshot of every setting the exporter reads.
Values resolve per setting in this order:

1. Explicit CLI flag (argparse namespace attribute that is not None)
2. Environment fallback `SPHINX_EXPORTER_<FLAG>` (e.g. SPHINX_EXPORTER_LISTEN_PORT)
3. Built-in default

The process entry loads a `.env` file (python-dotenv) before building the
config; real environment variables always win over `.env` values.
"""
from __future__ import annotations

import argparse
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sphinx_exporter.utils.env_flags import env_name, parse_bool
from sphinx_exporter.utils.exceptions import ConfigError

__all__ = [
    "DEFAULTS",
    "SourceSettings",
    "LoopSettings",
    "MetricsSettings",
    "ReconcileSettings",
    "LoggingSettings",
    "RuntimeConfig",
    "build_runtime_config",
]

DEFAULTS: dict[str, str] = {
    "sphinx-address": "127.0.0.1",
    "sphinx-port": "9306",
    "listen-address": "0.0.0.0",
    "listen-port": "9247",
    "interval": "5",
    "max-cycles": "",
    "query-timeout": "",
    "zero-on-outage": "false",
    "log-level": "INFO",
    "log-file": "",
}

@dataclass(frozen=True)
class SourceSettings:
    host: str
    port: int
    # None keeps queries unbounded: a hung source stalls later cycles.
    query_timeout: float | None = None

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

@dataclass(frozen=True)
class LoopSettings:
    interval_seconds: float
    max_cycles: int | None = None

@dataclass(frozen=True)
class MetricsSettings:
    host: str
    port: int

@dataclass(frozen=True)
class ReconcileSettings:
    zero_on_outage: bool = False

@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    file: str | None = None

@dataclass(frozen=True)
class RuntimeConfig:
    source: SourceSettings
    loop: LoopSettings
    metrics: MetricsSettings
    reconcile: ReconcileSettings
    logging: LoggingSettings


def _raw(flag: str, args: Mapping[str, Any], environ: Mapping[str, str]) -> str:
    value = args.get(flag.replace('-', '_'))
    if value is not None:
        return str(value)
    return environ.get(env_name(flag), DEFAULTS[flag])

def _port(flag: str, raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise ConfigError(f"--{flag} must be an integer, got {raw!r}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"--{flag} out of range: {port}")
    return port

def _positive_float(flag: str, raw: str) -> float:
    try:
        val = float(raw)
    except ValueError:
        raise ConfigError(f"--{flag} must be a number, got {raw!r}") from None
    if not math.isfinite(val) or val <= 0:
        raise ConfigError(f"--{flag} must be a finite number > 0, got {raw!r}")
    return val

def _optional(raw: str) -> str | None:
    return raw.strip() or None

def build_runtime_config(args: argparse.Namespace | Mapping[str, Any] | None = None,
                         environ: Mapping[str, str] | None = None) -> RuntimeConfig:
    """Resolve CLI/env/default values into a validated RuntimeConfig.

    Raises ConfigError for malformed values (non-numeric ports, negative
    interval, unknown boolean spelling).
    """
    if args is None:
        given: Mapping[str, Any] = {}
    elif isinstance(args, argparse.Namespace):
        given = vars(args)
    else:
        given = args
    env = os.environ if environ is None else environ

    def raw(flag: str) -> str:
        return _raw(flag, given, env)

    host = raw("sphinx-address").strip()
    if not host:
        raise ConfigError("--sphinx-address must not be empty")

    timeout_raw = _optional(raw("query-timeout"))
    query_timeout = _positive_float("query-timeout", timeout_raw) if timeout_raw else None

    max_cycles_raw = _optional(raw("max-cycles"))
    max_cycles: int | None = None
    if max_cycles_raw:
        try:
            max_cycles = int(max_cycles_raw)
        except ValueError:
            raise ConfigError(f"--max-cycles must be an integer, got {max_cycles_raw!r}") from None
        if max_cycles <= 0:
            max_cycles = None  # non-positive means unbounded

    zero_raw = raw("zero-on-outage")
    zero_on_outage = parse_bool(zero_raw)
    if zero_on_outage is None:
        raise ConfigError(f"--zero-on-outage expects a boolean, got {zero_raw!r}")

    return RuntimeConfig(
        source=SourceSettings(
            host=host,
            port=_port("sphinx-port", raw("sphinx-port")),
            query_timeout=query_timeout,
        ),
        loop=LoopSettings(
            interval_seconds=_positive_float("interval", raw("interval")),
            max_cycles=max_cycles,
        ),
        metrics=MetricsSettings(
            host=raw("listen-address").strip() or DEFAULTS["listen-address"],
            port=_port("listen-port", raw("listen-port")),
        ),
        reconcile=ReconcileSettings(zero_on_outage=zero_on_outage),
        logging=LoggingSettings(
            level=raw("log-level").strip().upper() or "INFO",
            file=_optional(raw("log-file")),
        ),
    )
