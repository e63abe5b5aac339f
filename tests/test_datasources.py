"""Tests for data source connectors."""

import pyarrow as pa
import pytest

from sqlbench.config import DataSourceConfig
from sqlbench.datasources import (
    DuckDBDataSource,
    PostgreSQLDataSource,
    SQLiteDataSource,
    create_datasource,
)
from sqlbench.errors import ExecutionError


def test_sqlite_connection(sqlite_datasource):
    assert sqlite_datasource.is_connected()
    assert sqlite_datasource.connection is not None


def test_sqlite_list_tables_skips_internal_tables(sqlite_datasource):
    sqlite_datasource.connection.execute(
        "CREATE TABLE _prisma_migrations (id TEXT PRIMARY KEY)"
    )
    sqlite_datasource.connection.execute(
        "CREATE TABLE tags (id INTEGER PRIMARY KEY AUTOINCREMENT, label TEXT)"
    )

    tables = sqlite_datasource.list_tables()

    assert tables == ["tags", "users"]


def test_sqlite_table_metadata(sqlite_datasource):
    metadata = sqlite_datasource.get_table_metadata("users")

    names = [col.name for col in metadata.columns]
    assert names == ["id", "active", "name", "score"]
    assert metadata.columns[0].primary_key is True
    assert metadata.columns[1].data_type == "BOOLEAN"
    assert not any(col.primary_key for col in metadata.columns[1:])


def test_sqlite_metadata_for_missing_table_is_empty(sqlite_datasource):
    metadata = sqlite_datasource.get_table_metadata("missing")

    assert metadata.columns == []


def test_sqlite_run_query_returns_arrow(sqlite_datasource):
    table = sqlite_datasource.run_query(
        "SELECT id, name FROM users WHERE score > ? ORDER BY id", [8]
    )

    assert isinstance(table, pa.Table)
    assert table.schema.names == ["id", "name"]
    assert table.column(1).to_pylist() == ["Grace"]


def test_sqlite_run_query_keeps_columns_for_empty_result(sqlite_datasource):
    table = sqlite_datasource.run_query("SELECT id, name FROM users WHERE id < 0")

    assert table.num_rows == 0
    assert table.schema.names == ["id", "name"]


def test_sqlite_mixed_column_types_fall_back_to_strings(sqlite_datasource):
    sqlite_datasource.run_mutation("INSERT INTO users (score) VALUES ('n/a')")

    table = sqlite_datasource.run_query("SELECT score FROM users ORDER BY id")

    assert table.column(0).to_pylist() == ["9.5", "7.0", "n/a"]


def test_sqlite_run_mutation_counts_rows(sqlite_datasource):
    assert sqlite_datasource.run_mutation("UPDATE users SET score = score + 1") == 2
    assert sqlite_datasource.run_mutation("CREATE TABLE t (id INTEGER)") == 0


def test_sqlite_errors_carry_engine_message(sqlite_datasource):
    with pytest.raises(ExecutionError) as exc_info:
        sqlite_datasource.run_query("SELECT nope FROM users")

    assert "no such column" in exc_info.value.message
    assert exc_info.value.statement == "SELECT nope FROM users"


def test_duckdb_list_tables(duckdb_datasource):
    duckdb_datasource.run_mutation("CREATE TABLE _prisma_migrations (id VARCHAR)")

    assert duckdb_datasource.list_tables() == ["items"]


def test_duckdb_table_metadata(duckdb_datasource):
    metadata = duckdb_datasource.get_table_metadata("items")

    names = [col.name for col in metadata.columns]
    assert names == ["id", "name", "qty", "price"]
    id_col = metadata.columns[0]
    assert id_col.primary_key is True
    assert id_col.nullable is False
    assert metadata.columns[3].data_type == "DOUBLE"


def test_duckdb_metadata_resolves_table_name_case(duckdb_datasource):
    metadata = duckdb_datasource.get_table_metadata("ITEMS")

    assert metadata.table_name == "items"
    assert metadata.columns[0].primary_key is True


def test_duckdb_metadata_for_missing_table_is_empty(duckdb_datasource):
    assert duckdb_datasource.get_table_metadata("missing").columns == []


def test_duckdb_run_query(duckdb_datasource):
    table = duckdb_datasource.run_query(
        "SELECT name FROM items WHERE qty > ? ORDER BY id", [5]
    )

    assert table.num_rows == 2
    assert table.column(0).to_pylist() == ["bolt", "nut"]


def test_duckdb_run_mutation_counts_rows(duckdb_datasource):
    assert duckdb_datasource.run_mutation("UPDATE items SET qty = qty + 1") == 2
    assert duckdb_datasource.run_mutation("DELETE FROM items WHERE id = ?", [1]) == 1


def test_duckdb_errors_are_wrapped(duckdb_datasource):
    with pytest.raises(ExecutionError):
        duckdb_datasource.run_query("SELECT * FROM does_not_exist")


def test_placeholders():
    sqlite_ds = SQLiteDataSource("s", {})
    pg_ds = PostgreSQLDataSource("p", {})

    assert sqlite_ds.placeholders(3) == "?, ?, ?"
    assert pg_ds.placeholders(2) == "%s, %s"


def test_create_datasource_by_type():
    duck = create_datasource(DataSourceConfig(name="d", type="duckdb", config={}))
    lite = create_datasource(DataSourceConfig(name="s", type="sqlite", config={}))

    assert isinstance(duck, DuckDBDataSource)
    assert isinstance(lite, SQLiteDataSource)
    assert lite.db_path == ":memory:"


def test_create_datasource_rejects_unknown_type():
    with pytest.raises(ValueError):
        create_datasource(DataSourceConfig(name="x", type="oracle", config={}))


def test_context_manager_connects_and_disconnects():
    ds = SQLiteDataSource("ctx", {"path": ":memory:"})

    with ds:
        assert ds.is_connected()

    assert not ds.is_connected()
    assert ds.connection is None


class FakePool:
    """Stand-in for psycopg2's ThreadedConnectionPool."""

    def __init__(self, minconn, maxconn, **kwargs):
        self.kwargs = kwargs
        self.checked_out = []
        self.closed = False

    def getconn(self):
        conn = object()
        self.checked_out.append(conn)
        return conn

    def putconn(self, conn):
        self.checked_out.remove(conn)

    def closeall(self):
        self.closed = True


def test_postgresql_connect_returns_test_connection_to_pool(monkeypatch):
    monkeypatch.setattr("sqlbench.datasources.postgresql.pool.ThreadedConnectionPool", FakePool)
    ds = PostgreSQLDataSource(
        "pg",
        {"host": "localhost", "database": "app", "user": "app", "password": "secret"},
    )

    ds.connect()

    assert ds.is_connected()
    assert ds._pool.checked_out == []
    assert ds._pool.kwargs["port"] == 5432
    assert ds.connection is None

    fake = ds._pool
    ds.disconnect()
    assert fake.closed
    assert not ds.is_connected()
