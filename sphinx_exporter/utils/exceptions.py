"""sphinx-exporter exception hierarchy.

A small exception tree for categorizing collection failures. The cycle
catches `ExporterError` subclasses, logs them, counts them by kind and ends
the collect phase early; none of them is fatal to the process.
"""
from __future__ import annotations


class ExporterError(Exception):
    """Base class for all exporter exceptions."""


class ConfigError(ExporterError):
    """Invalid CLI flag or environment value."""


class DuplicateMetricError(ExporterError):
    """A metric key was registered twice (programming error)."""


class SourceConnectionError(ExporterError):
    """Stats source could not be reached or refused the session.

    `kind` is one of UNREACHABLE, AUTHENTICATION, PROTOCOL.
    """

    UNREACHABLE = "unreachable"
    AUTHENTICATION = "authentication"
    PROTOCOL = "protocol"

    def __init__(self, message: str, kind: str = UNREACHABLE) -> None:
        super().__init__(message)
        self.kind = kind

    def __str__(self) -> str:
        return f"[{self.kind}] {super().__str__()}"


class QueryError(ExporterError):
    """Malformed query or failure reported by the stats source."""


class UnsafeIdentifierError(QueryError):
    """Index name rejected by the identifier allow-list; no query was sent."""

    def __init__(self, name: str) -> None:
        super().__init__(f"refusing to query index with unsafe name {name!r}")
        self.name = name


class StatParseError(ExporterError):
    """A stat value for a known metric was not numeric."""

    def __init__(self, stat_name: str, raw_value: object, index_name: str | None = None) -> None:
        where = f" (index {index_name!r})" if index_name else ""
        super().__init__(f"stat {stat_name!r} has non-numeric value {raw_value!r}{where}")
        self.stat_name = stat_name
        self.raw_value = raw_value
        self.index_name = index_name


def classify_exception(exc: BaseException) -> str:
    """Return the error-kind label used by the cycle error counter."""
    if isinstance(exc, SourceConnectionError):
        return 'connection'
    if isinstance(exc, QueryError):
        return 'query'
    if isinstance(exc, StatParseError):
        return 'parse'
    return 'unknown'


__all__ = [
    "ExporterError",
    "ConfigError",
    "DuplicateMetricError",
    "SourceConnectionError",
    "QueryError",
    "UnsafeIdentifierError",
    "StatParseError",
    "classify_exception",
]
