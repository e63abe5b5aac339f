"""Shared fixtures: small in-memory SQLite and DuckDB databases."""

import pytest

from sqlbench.datasources.duckdb import DuckDBDataSource
from sqlbench.datasources.sqlite import SQLiteDataSource


@pytest.fixture
def sqlite_datasource():
    """In-memory SQLite datasource with a users table."""
    ds = SQLiteDataSource("test_sqlite", {"path": ":memory:"})
    ds.connect()

    conn = ds.connection
    conn.execute("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            active BOOLEAN,
            name TEXT,
            score REAL
        )
    """)
    conn.execute("""
        INSERT INTO users (active, name, score) VALUES
            (1, 'Grace', 9.5),
            (0, 'Linus', 7.0)
    """)

    yield ds

    ds.disconnect()


@pytest.fixture
def duckdb_datasource():
    """In-memory DuckDB datasource with a sequence-keyed items table."""
    ds = DuckDBDataSource("test_duck", {"path": ":memory:", "read_only": False})
    ds.connect()

    conn = ds.connection
    conn.execute("CREATE SEQUENCE items_id_seq")
    conn.execute("""
        CREATE TABLE items (
            id INTEGER PRIMARY KEY DEFAULT nextval('items_id_seq'),
            name VARCHAR,
            qty INTEGER,
            price DOUBLE
        )
    """)
    conn.execute("""
        INSERT INTO items (name, qty, price) VALUES
            ('bolt', 10, 0.25),
            ('nut', 25, 0.1)
    """)

    yield ds

    ds.disconnect()
