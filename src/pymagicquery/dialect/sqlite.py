"""SQLite dialect implementation."""

from __future__ import annotations

from io import StringIO

from pymagicquery._utils import escape_string_literal
from pymagicquery.dialect._base import Dialect, DialectName

# SQLite reserved keywords
_SQLITE_RESERVED: frozenset[str] = frozenset({
    "abort", "action", "add", "after", "all", "alter", "always", "analyze",
    "and", "as", "asc", "attach", "autoincrement", "before", "begin",
    "between", "by", "cascade", "case", "cast", "check", "collate",
    "column", "commit", "conflict", "constraint", "create", "cross",
    "current", "current_date", "current_time", "current_timestamp",
    "database", "default", "deferrable", "deferred", "delete", "desc",
    "detach", "distinct", "do", "drop", "each", "else", "end", "escape",
    "except", "exclude", "exclusive", "exists", "explain", "fail",
    "filter", "first", "following", "for", "foreign", "from", "full",
    "generated", "glob", "group", "groups", "having", "if", "ignore",
    "immediate", "in", "index", "indexed", "initially", "inner", "insert",
    "instead", "intersect", "into", "is", "isnull", "join", "key",
    "last", "left", "like", "limit", "match", "materialized", "natural",
    "no", "not", "nothing", "notnull", "null", "nulls", "of", "offset",
    "on", "or", "order", "others", "outer", "over", "partition", "plan",
    "pragma", "preceding", "primary", "query", "raise", "range",
    "recursive", "references", "regexp", "reindex", "release", "rename",
    "replace", "restrict", "returning", "right", "rollback", "row",
    "rows", "savepoint", "select", "set", "table", "temp", "temporary",
    "then", "ties", "to", "transaction", "trigger", "true", "unbounded",
    "union", "unique", "update", "using", "vacuum", "values", "view",
    "virtual", "when", "where", "window", "with", "without",
})


class SQLiteDialect(Dialect):
    """SQLite dialect."""

    name = DialectName.SQLITE

    # --- Literals ---

    def write_string_literal(self, w: StringIO, value: str) -> None:
        w.write(f"'{escape_string_literal(value)}'")

    def write_bytes_literal(self, w: StringIO, value: bytes) -> None:
        hex_str = value.hex().upper()
        w.write(f"X'{hex_str}'")

    def write_bool_literal(self, w: StringIO, value: bool) -> None:
        # SQLite stores booleans as integers
        w.write("1" if value else "0")

    # --- Identifiers ---

    def write_quoted_identifier(self, w: StringIO, name: str) -> None:
        escaped = name.replace('"', '""')
        w.write(f'"{escaped}"')

    def reserved_keywords(self) -> frozenset[str]:
        return _SQLITE_RESERVED

    def max_identifier_length(self) -> int:
        return 0  # No limit

    # --- Clauses ---

    def write_limit(self, w: StringIO, limit: str, offset: str | None) -> None:
        w.write("LIMIT ")
        if offset is not None:
            w.write(f"{offset}, ")
        w.write(limit)
