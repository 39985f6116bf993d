"""Abstract base class for SQL dialects."""

from __future__ import annotations

import datetime
import enum
import math
from abc import ABC, abstractmethod
from decimal import Decimal
from io import StringIO
from typing import Any

from pymagicquery._errors import ERR_MSG_UNSUPPORTED_TYPE, UnsupportedTypeError
from pymagicquery._utils import needs_quoting, validate_identifier


class DialectName(enum.StrEnum):
    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"
    DUCKDB = "duckdb"


class Dialect(ABC):
    """Abstract base class defining the SQL dialect interface.

    All quoting and escaping lives behind this interface. Leaf nodes are the
    only callers; operators and clauses pass the dialect through untouched.
    Methods receive a StringIO writer.
    """

    name: DialectName

    # --- Literals ---

    @abstractmethod
    def write_string_literal(self, w: StringIO, value: str) -> None: ...

    @abstractmethod
    def write_bytes_literal(self, w: StringIO, value: bytes) -> None: ...

    @abstractmethod
    def write_bool_literal(self, w: StringIO, value: bool) -> None: ...

    # --- Identifiers ---

    @abstractmethod
    def write_quoted_identifier(self, w: StringIO, name: str) -> None: ...

    @abstractmethod
    def reserved_keywords(self) -> frozenset[str]: ...

    @abstractmethod
    def max_identifier_length(self) -> int: ...

    # --- Clauses ---

    @abstractmethod
    def write_limit(self, w: StringIO, limit: str, offset: str | None) -> None: ...

    # --- Shared writers ---

    def write_identifier(self, w: StringIO, name: str) -> None:
        """Write ``name``, quoting it only when it is not a plain identifier."""
        if name == "*":
            w.write(name)
            return
        validate_identifier(name, self.max_identifier_length())
        if needs_quoting(name, self.reserved_keywords()):
            self.write_quoted_identifier(w, name)
        else:
            w.write(name)

    def write_value(self, w: StringIO, value: Any) -> None:
        """Write a Python value as a SQL literal."""
        if value is None:
            w.write("NULL")
        elif isinstance(value, bool):
            self.write_bool_literal(w, value)
        elif isinstance(value, enum.Enum):
            self.write_value(w, value.value)
        elif isinstance(value, int):
            w.write(str(value))
        elif isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise UnsupportedTypeError(
                    ERR_MSG_UNSUPPORTED_TYPE,
                    f"non-finite float {value!r} has no SQL literal",
                )
            w.write(repr(value))
        elif isinstance(value, Decimal):
            w.write(str(value))
        elif isinstance(value, str):
            if "\x00" in value:
                raise UnsupportedTypeError(
                    "string literals cannot contain null bytes",
                    f"null byte found in string literal: {value!r}",
                )
            self.write_string_literal(w, value)
        elif isinstance(value, (bytes, bytearray)):
            self.write_bytes_literal(w, bytes(value))
        elif isinstance(value, datetime.datetime):
            self.write_string_literal(w, value.isoformat(sep=" "))
        elif isinstance(value, (datetime.date, datetime.time)):
            self.write_string_literal(w, value.isoformat())
        else:
            raise UnsupportedTypeError(
                ERR_MSG_UNSUPPORTED_TYPE,
                f"cannot write {type(value).__name__} value as a SQL literal",
            )

    def quote_identifier(self, name: str) -> str:
        w = StringIO()
        self.write_identifier(w, name)
        return w.getvalue()

    def quote_value(self, value: Any) -> str:
        w = StringIO()
        self.write_value(w, value)
        return w.getvalue()
