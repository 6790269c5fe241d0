"""Sphinx / Manticore stats source client.

The search daemon exposes a SQL interface over the MySQL wire protocol
(port 9306 by default), so PyMySQL is used for transport. Two statements are
issued per cycle:

    SHOW TABLES                    -> rows of (name, type)
    SHOW INDEX <name> STATUS       -> rows of (stat_name, stat_value)

Identifiers cannot be bound as query parameters, so index names are checked
against an alphanumeric/underscore allow-list before interpolation.

The client holds configuration only; connections are created per cycle and
owned by the caller.
"""
from __future__ import annotations

import logging
import re
import pymysql  # type: ignore
from pymysql.connections import Connection  # type: ignore

from sphinx_exporter.config.runtime_config import SourceSettings
from sphinx_exporter.utils.exceptions import (
    QueryError,
    SourceConnectionError,
    StatParseError,
    UnsafeIdentifierError,
)

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r'[A-Za-z0-9_]+')

# MySQL client/server error codes used for connection failure classification
_AUTH_ERROR_CODES = frozenset({1044, 1045, 1698})
_UNREACHABLE_ERROR_CODES = frozenset({2002, 2003, 2005, 2006, 2013})


def validate_index_name(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER_RE.fullmatch(name):
        raise UnsafeIdentifierError(str(name))
    return name


def parse_stat_value(raw: object, stat_name: str = "", index_name: str | None = None) -> float:
    """Parse a textual stat value to float; StatParseError on anything non-numeric."""
    text = raw.decode('utf-8', 'replace') if isinstance(raw, (bytes, bytearray)) else raw
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)
    # Digit-group underscores are Python-only float syntax
    if not isinstance(text, str) or not text.strip() or "_" in text:
        raise StatParseError(stat_name, raw, index_name)
    try:
        return float(text)
    except ValueError:
        raise StatParseError(stat_name, raw, index_name) from None


def _text(value: object) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode('utf-8', 'replace')
    return "" if value is None else str(value)


def classify_connection_error(exc: BaseException) -> str:
    if isinstance(exc, pymysql.err.OperationalError):
        code = exc.args[0] if exc.args else None
        if code in _AUTH_ERROR_CODES:
            return SourceConnectionError.AUTHENTICATION
        if code in _UNREACHABLE_ERROR_CODES:
            return SourceConnectionError.UNREACHABLE
        return SourceConnectionError.PROTOCOL
    if isinstance(exc, OSError):
        return SourceConnectionError.UNREACHABLE
    return SourceConnectionError.PROTOCOL


class SphinxClient:
    def __init__(self, settings: SourceSettings) -> None:
        self.settings = settings

    def connect(self) -> Connection:
        """Open a session to the stats source.

        Raises SourceConnectionError classified as unreachable, authentication
        or protocol. The caller must close the returned connection.
        """
        s = self.settings
        try:
            return pymysql.connect(
                host=s.host,
                port=s.port,
                user="",
                password="",
                read_timeout=s.query_timeout,
                autocommit=True,
            )
        except (pymysql.err.MySQLError, OSError) as e:
            kind = classify_connection_error(e)
            raise SourceConnectionError(f"cannot connect to {s.address}: {e}", kind) from e

    def _query(self, conn: Connection, sql: str) -> list[tuple]:
        try:
            with conn.cursor() as cur:
                cur.execute(sql)
                return list(cur.fetchall())
        except (pymysql.err.MySQLError, ValueError) as e:
            # ValueError covers UnicodeDecodeError on undecodable result text
            raise QueryError(f"{sql!r} failed: {e}") from e

    def list_indexes(self, conn: Connection) -> list[tuple[str, str]]:
        """Enumerate (name, kind) for every index the source knows, in source order."""
        rows = self._query(conn, "SHOW TABLES")
        out: list[tuple[str, str]] = []
        for row in rows:
            if not row:
                raise QueryError("SHOW TABLES returned an empty row")
            kind = _text(row[1]) if len(row) > 1 else ""
            out.append((_text(row[0]), kind))
        return out

    def fetch_index_stats(self, conn: Connection, index_name: str) -> list[tuple[str, str]]:
        """Raw (stat_name, stat_value) pairs for one index; values stay textual."""
        name = validate_index_name(index_name)
        rows = self._query(conn, f"SHOW INDEX {name} STATUS")
        stats: list[tuple[str, str]] = []
        for row in rows:
            if len(row) < 2:
                raise QueryError(f"malformed status row for index {name!r}: {row!r}")
            stats.append((_text(row[0]), _text(row[1])))
        return stats


__all__ = [
    "SphinxClient",
    "validate_index_name",
    "parse_stat_value",
    "classify_connection_error",
]
