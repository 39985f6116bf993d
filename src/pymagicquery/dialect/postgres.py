"""PostgreSQL dialect implementation."""

from __future__ import annotations

from io import StringIO

from pymagicquery._utils import COMMON_RESERVED_KEYWORDS, escape_string_literal
from pymagicquery.dialect._base import Dialect, DialectName

_POSTGRES_RESERVED: frozenset[str] = COMMON_RESERVED_KEYWORDS | frozenset({
    "analyse", "analyze", "any", "array", "asymmetric", "both", "cast",
    "collate", "current_catalog", "current_role", "current_user", "deferrable",
    "do", "end", "except", "fetch", "grant", "initially", "intersect",
    "lateral", "leading", "localtime", "localtimestamp", "offset", "only",
    "placing", "returning", "session_user", "some", "symmetric", "trailing",
    "user", "variadic", "window",
})

_MAX_IDENTIFIER_LENGTH = 63


class PostgresDialect(Dialect):
    """PostgreSQL dialect."""

    name = DialectName.POSTGRESQL

    # --- Literals ---

    def write_string_literal(self, w: StringIO, value: str) -> None:
        w.write(f"'{escape_string_literal(value)}'")

    def write_bytes_literal(self, w: StringIO, value: bytes) -> None:
        hex_str = value.hex().upper()
        w.write(f"'\\x{hex_str}'")

    def write_bool_literal(self, w: StringIO, value: bool) -> None:
        w.write("TRUE" if value else "FALSE")

    # --- Identifiers ---

    def write_quoted_identifier(self, w: StringIO, name: str) -> None:
        escaped = name.replace('"', '""')
        w.write(f'"{escaped}"')

    def reserved_keywords(self) -> frozenset[str]:
        return _POSTGRES_RESERVED

    def max_identifier_length(self) -> int:
        return _MAX_IDENTIFIER_LENGTH

    # --- Clauses ---

    def write_limit(self, w: StringIO, limit: str, offset: str | None) -> None:
        w.write(f"LIMIT {limit}")
        if offset is not None:
            w.write(f" OFFSET {offset}")
