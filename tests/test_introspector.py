"""Tests for schema introspection."""

import pytest

from sqlbench.catalog import ColumnDescriptor, SchemaIntrospector, TypeFamily
from sqlbench.errors import InvalidIdentifierError, TableNotFoundError, ValidationError


def test_describe_returns_native_order(sqlite_datasource):
    columns = SchemaIntrospector(sqlite_datasource).describe("users")

    assert [col.name for col in columns] == ["id", "active", "name", "score"]


def test_describe_resolves_families_once(sqlite_datasource):
    columns = SchemaIntrospector(sqlite_datasource).describe("users")
    families = {col.name: col.family for col in columns}

    assert families == {
        "id": TypeFamily.INTEGER,
        "active": TypeFamily.BOOLEAN,
        "name": TypeFamily.TEXT,
        "score": TypeFamily.FLOATING,
    }


def test_describe_flags_primary_key(duckdb_datasource):
    columns = SchemaIntrospector(duckdb_datasource).describe("items")

    keys = [col.name for col in columns if col.is_primary_key]
    assert keys == ["id"]


def test_describe_missing_table(sqlite_datasource):
    with pytest.raises(TableNotFoundError):
        SchemaIntrospector(sqlite_datasource).describe("ghosts")


def test_describe_validates_table_name(sqlite_datasource):
    with pytest.raises(InvalidIdentifierError):
        SchemaIntrospector(sqlite_datasource).describe("users; DROP TABLE users")


def test_describe_sees_schema_changes(sqlite_datasource):
    """Metadata is read fresh on every call."""
    introspector = SchemaIntrospector(sqlite_datasource)
    introspector.describe("users")

    sqlite_datasource.run_mutation("ALTER TABLE users ADD COLUMN email TEXT")

    assert introspector.describe("users")[-1].name == "email"


def test_primary_key_lookup():
    columns = [
        ColumnDescriptor(name="ID", declared_type="INTEGER", is_primary_key=True),
        ColumnDescriptor(name="label", declared_type="TEXT"),
    ]

    assert SchemaIntrospector.primary_key("t", columns).name == "ID"


def test_primary_key_missing_or_composite():
    plain = [ColumnDescriptor(name="label", declared_type="TEXT")]
    composite = [
        ColumnDescriptor(name="a", declared_type="INTEGER", is_primary_key=True),
        ColumnDescriptor(name="b", declared_type="INTEGER", is_primary_key=True),
    ]

    with pytest.raises(ValidationError):
        SchemaIntrospector.primary_key("t", plain)
    with pytest.raises(ValidationError):
        SchemaIntrospector.primary_key("t", composite)


def test_column_descriptor_derives_family():
    assert ColumnDescriptor(name="n", declared_type="Float").family == TypeFamily.FLOATING
