"""Identifier and literal helpers shared by the dialects."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pymagicquery._errors import InvalidIdentifierError

PLAIN_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# Keywords reserved by every supported dialect
COMMON_RESERVED_KEYWORDS: frozenset[str] = frozenset({
    "all", "alter", "and", "as", "asc", "between", "by", "case", "check",
    "column", "constraint", "create", "cross", "current_date", "current_time",
    "current_timestamp", "default", "delete", "desc", "distinct", "drop",
    "else", "exists", "false", "for", "foreign", "from", "group", "having",
    "in", "index", "inner", "insert", "into", "is", "join", "left", "like",
    "limit", "not", "null", "on", "or", "order", "outer", "primary",
    "references", "right", "select", "set", "table", "then", "to", "true",
    "union", "unique", "update", "using", "values", "when", "where", "with",
})


def validate_identifier(name: str, max_length: int = 0) -> None:
    """Reject identifiers that no dialect can quote.

    ``max_length`` of 0 means the dialect imposes no limit.
    """
    if not name:
        raise InvalidIdentifierError(
            "identifier cannot be empty",
            "empty identifier provided",
        )
    if "\x00" in name:
        raise InvalidIdentifierError(
            "identifier cannot contain null bytes",
            f"null byte found in identifier: {name!r}",
        )
    if max_length and len(name) > max_length:
        raise InvalidIdentifierError(
            "identifier too long",
            f"identifier '{name}' exceeds {max_length} characters",
        )


def needs_quoting(name: str, reserved: frozenset[str]) -> bool:
    """Whether ``name`` must be quoted to be read back as the same identifier."""
    return not PLAIN_IDENTIFIER_RE.match(name) or name.lower() in reserved


def escape_string_literal(value: str) -> str:
    """Escape a string for use as a standard SQL string literal."""
    return value.replace("'", "''")


def escape_backslash_string_literal(value: str) -> str:
    """Escape a string for dialects where backslash is an escape character."""
    return value.replace("\\", "\\\\").replace("'", "''")


def is_collection(value: Any) -> bool:
    """Whether a bound parameter value expands to a value list."""
    return isinstance(value, (list, tuple, set, frozenset))


def is_bound(parameters: Mapping[str, Any], name: str) -> bool:
    """Whether ``name`` is supplied; a ``None`` value counts as not supplied."""
    return parameters.get(name) is not None


def is_numeral(value: Any) -> bool:
    """Whether ``value`` can be written as an unquoted integer numeral."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    return isinstance(value, str) and value.isascii() and value.isdigit()
