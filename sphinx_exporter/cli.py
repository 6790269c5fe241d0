"""Process entry for sphinx-exporter.

Usage:
    sphinx-exporter --sphinx-address 10.0.0.5 --sphinx-port 9306 --listen-port 9247

Every flag falls back to SPHINX_EXPORTER_<FLAG> in the environment (a `.env`
file in the working directory is loaded first, never overriding real env).

Exit codes:
  0 loop finished (max cycles reached or signal received)
  1 metrics listener failed to bind or died
  2 invalid configuration
"""
from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading

from dotenv import load_dotenv  # type: ignore

from sphinx_exporter.config.runtime_config import DEFAULTS, RuntimeConfig, build_runtime_config
from sphinx_exporter.metrics.registry import build_default_registry
from sphinx_exporter.metrics.server import setup_metrics_server
from sphinx_exporter.orchestrator.context import RuntimeContext
from sphinx_exporter.orchestrator.cycle import run_cycle
from sphinx_exporter.orchestrator.loop import run_loop
from sphinx_exporter.orchestrator.reconciler import Reconciler
from sphinx_exporter.source.client import SphinxClient
from sphinx_exporter.utils.env_flags import env_name
from sphinx_exporter.utils.exceptions import ConfigError
from sphinx_exporter.utils.logging_utils import setup_logging
from sphinx_exporter.version import get_version

logger = logging.getLogger("sphinx_exporter")

SUPERVISE_POLL_SECONDS = 1.0


def _help(flag: str, text: str) -> str:
    default = DEFAULTS[flag] or "unset"
    return f"{text} (default: {default}; env {env_name(flag)})"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    # Defaults stay None so build_runtime_config can tell "not given" from "given"
    p = argparse.ArgumentParser(prog="sphinx-exporter", description="Prometheus exporter for Sphinx index stats")
    p.add_argument("--sphinx-address", help=_help("sphinx-address", "Sphinx MySQL address"))
    p.add_argument("--sphinx-port", help=_help("sphinx-port", "Sphinx MySQL port"))
    p.add_argument("--listen-address", help=_help("listen-address", "Address for the metrics endpoint"))
    p.add_argument("--listen-port", help=_help("listen-port", "Port for sphinx exporter to listen on"))
    p.add_argument("--interval", help=_help("interval", "Seconds to sleep between collection cycles"))
    p.add_argument("--max-cycles", help=_help("max-cycles", "Stop after N cycles"))
    p.add_argument("--query-timeout", help=_help("query-timeout", "Read timeout in seconds for source queries"))
    p.add_argument("--zero-on-outage", action=argparse.BooleanOptionalAction, default=None,
                   help=_help("zero-on-outage", "Zero every known index when the source is unreachable"))
    p.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                   help=_help("log-level", "Logging level"))
    p.add_argument("--log-file", help=_help("log-file", "Optional log file path"))
    p.add_argument("--version", action="version", version=f"sphinx-exporter {get_version()}")
    return p.parse_args(argv)


def build_context(cfg: RuntimeConfig) -> RuntimeContext:
    metrics = build_default_registry()
    return RuntimeContext(
        metrics=metrics,
        reconciler=Reconciler(metrics, zero_on_outage=cfg.reconcile.zero_on_outage),
        source=SphinxClient(cfg.source),
        config=cfg,
    )


def _install_signal_handlers(ctx: RuntimeContext) -> None:
    def _handler(sig, _frame):  # noqa: ANN001
        logger.info("Received signal %s, shutting down gracefully", sig)
        ctx.request_shutdown()
    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def main(argv: list[str] | None = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    try:
        cfg = build_runtime_config(args)
    except ConfigError as e:
        print(f"sphinx-exporter: configuration error: {e}", file=sys.stderr)
        return 2
    setup_logging(cfg.logging.level, cfg.logging.file)
    logger.info(
        "sphinx-exporter %s source=%s interval=%ss zero_on_outage=%s",
        get_version(), cfg.source.address, cfg.loop.interval_seconds, cfg.reconcile.zero_on_outage,
    )

    ctx = build_context(cfg)
    try:
        server, http_thread = setup_metrics_server(ctx.metrics, cfg.metrics.port, cfg.metrics.host)
    except OSError as e:
        logger.critical("Cannot bind metrics endpoint %s:%s: %s", cfg.metrics.host, cfg.metrics.port, e)
        return 1

    _install_signal_handlers(ctx)
    collector = threading.Thread(
        target=run_loop,
        args=(ctx,),
        kwargs={"cycle_fn": run_cycle, "interval": cfg.loop.interval_seconds, "max_cycles": cfg.loop.max_cycles},
        name="sphinx-collector",
        daemon=True,
    )
    collector.start()

    exit_code = 0
    while collector.is_alive():
        if not http_thread.is_alive():
            logger.critical("Metrics HTTP listener stopped unexpectedly; exiting")
            ctx.request_shutdown()
            exit_code = 1
            break
        collector.join(SUPERVISE_POLL_SECONDS)
    ctx.request_shutdown()
    server.shutdown()
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
