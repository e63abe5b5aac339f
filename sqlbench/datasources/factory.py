"""Build data sources from configuration."""

from .base import DataSource
from .duckdb import DuckDBDataSource
from .postgresql import PostgreSQLDataSource
from .sqlite import SQLiteDataSource

DATASOURCE_TYPES = {
    "duckdb": DuckDBDataSource,
    "sqlite": SQLiteDataSource,
    "postgresql": PostgreSQLDataSource,
}


def create_datasource(ds_config) -> DataSource:
    """Instantiate the data source class named by a DataSourceConfig."""
    datasource_class = DATASOURCE_TYPES.get(ds_config.type)
    if datasource_class is None:
        raise ValueError(f"Unsupported data source type: {ds_config.type}")
    return datasource_class(ds_config.name, ds_config.config)
