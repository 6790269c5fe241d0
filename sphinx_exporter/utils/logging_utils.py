"""Unified logging utilities for sphinx-exporter."""
from __future__ import annotations

import logging
import os
import sys

DEFAULT_FORMAT = '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'

SUPPRESSED_LOGGERS = [
    'pymysql', 'urllib3',
]

def setup_logging(level: str = 'INFO', log_file: str | None = None, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """Configure root logging.

    Console handler writes to stdout. A file handler is added when `log_file`
    is given and always uses DEFAULT_FORMAT. Re-initialisation replaces any
    handlers installed by a previous call.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)
    # Remove existing handlers to avoid duplication on re-init
    for h in root.handlers[:]:
        root.removeHandler(h)
        try:
            h.flush()
            h.close()
        except (OSError, ValueError):
            pass

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(log_level)
    console.setFormatter(logging.Formatter(fmt))
    root.addHandler(console)

    if log_file:
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            fh = logging.FileHandler(log_file, encoding='utf-8')
        except OSError as e:
            root.error("Failed to create log file handler for %s: %s", log_file, e)
        else:
            fh.setLevel(log_level)
            fh.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            root.addHandler(fh)

    for name in SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root

__all__ = ["DEFAULT_FORMAT", "setup_logging"]
