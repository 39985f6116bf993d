"""Fixtures for integration tests against in-process databases."""

from __future__ import annotations

import pytest

from pymagicquery.dialect._base import Dialect
from pymagicquery.dialect.duckdb import DuckDBDialect
from pymagicquery.dialect.sqlite import SQLiteDialect

SEED_ROWS = [
    ("Alice", 34, "Paris", True),
    ("Bob", 25, "Berlin", False),
    ("Charlie", 41, None, True),
    ("Diana", 29, "Paris", True),
    ("Eve", 52, None, False),
]


def _setup_sqlite(conn) -> None:
    conn.execute("""
        CREATE TABLE people (
            name TEXT NOT NULL,
            age INTEGER NOT NULL,
            city TEXT,
            active INTEGER NOT NULL
        )
    """)
    for name, age, city, active in SEED_ROWS:
        conn.execute(
            "INSERT INTO people (name, age, city, active) VALUES (?, ?, ?, ?)",
            (name, age, city, 1 if active else 0),
        )
    conn.commit()


def _setup_duckdb(conn) -> None:
    conn.execute("""
        CREATE TABLE people (
            name VARCHAR NOT NULL,
            age INTEGER NOT NULL,
            city VARCHAR,
            active BOOLEAN NOT NULL
        )
    """)
    for row in SEED_ROWS:
        conn.execute(
            "INSERT INTO people (name, age, city, active) VALUES (?, ?, ?, ?)",
            list(row),
        )


@pytest.fixture(scope="session")
def sqlite_db():
    import sqlite3
    conn = sqlite3.connect(":memory:")
    _setup_sqlite(conn)
    yield conn
    conn.close()


@pytest.fixture(scope="session")
def duckdb_db():
    duckdb = pytest.importorskip("duckdb")
    conn = duckdb.connect(":memory:")
    _setup_duckdb(conn)
    yield conn
    conn.close()


_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "duckdb": DuckDBDialect(),
}


@pytest.fixture(params=["sqlite", "duckdb"])
def local_db(request):
    """Yields (connection, dialect, db_name) for each in-process database."""
    name = request.param
    conn = request.getfixturevalue(f"{name}_db")
    return conn, _DIALECTS[name], name
