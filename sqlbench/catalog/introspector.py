"""Schema introspection against a live data source."""

import logging
from typing import List

from ..datasources.base import DataSource
from ..errors import TableNotFoundError, ValidationError
from ..sql.identifiers import validate_identifier
from .schema import ColumnDescriptor
from .types import map_type

logger = logging.getLogger(__name__)


class SchemaIntrospector:
    """Reads table columns from the engine catalog on every call."""

    def __init__(self, datasource: DataSource):
        self.datasource = datasource

    def describe(self, table: str) -> List[ColumnDescriptor]:
        """Describe a table's columns in the engine's native order.

        Args:
            table: Table name

        Returns:
            Column descriptors with their type family resolved

        Raises:
            InvalidIdentifierError: If the table name is not allowed
            TableNotFoundError: If the engine knows no such table
        """
        validate_identifier(table, "table")
        metadata = self.datasource.get_table_metadata(table)
        if not metadata.columns:
            raise TableNotFoundError(table)

        columns = []
        for col_meta in metadata.columns:
            columns.append(
                ColumnDescriptor(
                    name=col_meta.name,
                    declared_type=col_meta.data_type,
                    is_primary_key=col_meta.primary_key,
                    nullable=col_meta.nullable,
                    family=map_type(col_meta.data_type),
                )
            )
        logger.debug(f"Described {table}: {len(columns)} columns")
        return columns

    def list_tables(self) -> List[str]:
        """List user tables of the data source."""
        return self.datasource.list_tables()

    @staticmethod
    def primary_key(table: str, columns: List[ColumnDescriptor]) -> ColumnDescriptor:
        """Return the single primary-key column of a table.

        Raises:
            ValidationError: If the table has no primary key or a composite one
        """
        keys = []
        for col in columns:
            if col.is_primary_key:
                keys.append(col)
        if not keys:
            raise ValidationError(f"Table {table} has no primary key")
        if len(keys) > 1:
            names = ", ".join(col.name for col in keys)
            raise ValidationError(
                f"Table {table} has a composite primary key ({names})"
            )
        return keys[0]
