"""Data source connectors."""

from .base import DataSource, ColumnMetadata, TableMetadata
from .duckdb import DuckDBDataSource
from .sqlite import SQLiteDataSource
from .postgresql import PostgreSQLDataSource
from .factory import create_datasource

__all__ = [
    "DataSource",
    "ColumnMetadata",
    "TableMetadata",
    "DuckDBDataSource",
    "SQLiteDataSource",
    "PostgreSQLDataSource",
    "create_datasource",
]
