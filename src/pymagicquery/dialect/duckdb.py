"""DuckDB dialect implementation."""

from __future__ import annotations

from io import StringIO

from pymagicquery._utils import escape_string_literal
from pymagicquery.dialect._base import Dialect, DialectName

# DuckDB reserved keywords
_DUCKDB_RESERVED: frozenset[str] = frozenset({
    "all", "alter", "and", "any", "array", "as", "asc", "between",
    "by", "case", "cast", "check", "column", "constraint", "create",
    "cross", "current", "current_date", "current_time", "current_timestamp",
    "default", "delete", "desc", "distinct", "drop", "else", "end",
    "except", "exists", "false", "for", "foreign", "from", "full",
    "grant", "group", "having", "in", "index", "inner", "insert",
    "intersect", "into", "is", "isnull", "join", "lateral", "left",
    "like", "limit", "not", "notnull", "null", "offset", "on", "or",
    "order", "outer", "primary", "references", "right", "select", "set",
    "table", "then", "to", "true", "union", "unique", "update", "using",
    "values", "when", "where", "with",
})


class DuckDBDialect(Dialect):
    """DuckDB dialect."""

    name = DialectName.DUCKDB

    # --- Literals ---

    def write_string_literal(self, w: StringIO, value: str) -> None:
        w.write(f"'{escape_string_literal(value)}'")

    def write_bytes_literal(self, w: StringIO, value: bytes) -> None:
        escaped = "".join(f"\\x{byte:02X}" for byte in value)
        w.write(f"'{escaped}'::BLOB")

    def write_bool_literal(self, w: StringIO, value: bool) -> None:
        w.write("TRUE" if value else "FALSE")

    # --- Identifiers ---

    def write_quoted_identifier(self, w: StringIO, name: str) -> None:
        escaped = name.replace('"', '""')
        w.write(f'"{escaped}"')

    def reserved_keywords(self) -> frozenset[str]:
        return _DUCKDB_RESERVED

    def max_identifier_length(self) -> int:
        return 0  # No limit

    # --- Clauses ---

    def write_limit(self, w: StringIO, limit: str, offset: str | None) -> None:
        w.write(f"LIMIT {limit}")
        if offset is not None:
            w.write(f" OFFSET {offset}")
