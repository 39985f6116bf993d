"""SQL dialect system for statement rendering."""

from pymagicquery.dialect._base import Dialect, DialectName
from pymagicquery.dialect.duckdb import DuckDBDialect
from pymagicquery.dialect.mysql import MySQLDialect
from pymagicquery.dialect.postgres import PostgresDialect
from pymagicquery.dialect.sqlite import SQLiteDialect

__all__ = [
    "Dialect",
    "DialectName",
    "DuckDBDialect",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "get_dialect",
]

_REGISTRY: dict[str, type[Dialect]] = {
    DialectName.MYSQL: MySQLDialect,
    DialectName.POSTGRESQL: PostgresDialect,
    DialectName.SQLITE: SQLiteDialect,
    DialectName.DUCKDB: DuckDBDialect,
}


def get_dialect(name: str) -> Dialect:
    """Get a dialect instance by name.

    Args:
        name: Dialect name ("mysql", "postgresql", "sqlite" or "duckdb").

    Returns:
        A Dialect instance.

    Raises:
        ValueError: If the dialect name is unknown.
    """
    cls = _REGISTRY.get(name)
    if cls is None:
        raise ValueError(
            f"unknown dialect: {name!r}. "
            f"Available: {', '.join(sorted(_REGISTRY))}"
        )
    return cls()
