"""Shared test fixtures."""

import pytest

from pymagicquery.dialect.duckdb import DuckDBDialect
from pymagicquery.dialect.mysql import MySQLDialect
from pymagicquery.dialect.postgres import PostgresDialect
from pymagicquery.dialect.sqlite import SQLiteDialect


@pytest.fixture
def mysql_dialect():
    return MySQLDialect()


@pytest.fixture
def pg_dialect():
    return PostgresDialect()


@pytest.fixture
def sqlite_dialect():
    return SQLiteDialect()


@pytest.fixture
def duckdb_dialect():
    return DuckDBDialect()
