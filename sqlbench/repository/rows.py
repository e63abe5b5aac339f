"""Generic CRUD over arbitrary tables, driven by introspected schema."""

import logging
from typing import Any, Dict, List, Mapping, Sequence, Set

from ..catalog.introspector import SchemaIntrospector
from ..catalog.schema import ColumnDescriptor, TableSnapshot, find_column
from ..catalog.types import coerce_value
from ..datasources.base import DataSource
from ..errors import ExecutionError, RowNotFoundError, ValidationError
from ..processor.projector import project_table
from ..sql.identifiers import validate_identifier

logger = logging.getLogger(__name__)


class RowRepository:
    """Row-level list, insert, update and delete for any table.

    Nothing about a table is known ahead of time: each operation reads the
    column metadata first, quotes only validated identifiers and binds
    every value as a parameter.
    """

    def __init__(self, datasource: DataSource):
        self.datasource = datasource
        self.introspector = SchemaIntrospector(datasource)

    def list(self, table: str) -> TableSnapshot:
        """Fetch all rows of a table with its column descriptors.

        Raises:
            InvalidIdentifierError: If the table name is not allowed
            TableNotFoundError: If the table does not exist
        """
        columns = self.introspector.describe(table)
        sql = f"SELECT * FROM {self.datasource.quote(table, 'table')}"
        result = project_table(self.datasource.run_query(sql))
        return TableSnapshot(table=table, columns=columns, rows=result.rows)

    def insert(self, table: str, field_values: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert a row and return it as stored, engine-assigned key included.

        Primary-key fields in ``field_values`` are ignored.

        Raises:
            ValidationError: If a field names a column the table lacks, or
                two fields resolve to the same column
        """
        columns = self.introspector.describe(table)
        seen: Set[str] = set()
        names: List[str] = []
        values: List[Any] = []
        for key, raw in field_values.items():
            column = self._require_column(table, columns, key)
            if column.name in seen:
                raise ValidationError(f"Column {column.name!r} given more than once for table {table}")
            seen.add(column.name)
            if column.is_primary_key:
                continue
            names.append(self.datasource.quote(column.name, "column"))
            values.append(coerce_value(raw, column.family))

        quoted_table = self.datasource.quote(table, "table")
        if names:
            sql = (
                f"INSERT INTO {quoted_table} ({', '.join(names)}) "
                f"VALUES ({self.datasource.placeholders(len(values))}) RETURNING *"
            )
        else:
            sql = f"INSERT INTO {quoted_table} DEFAULT VALUES RETURNING *"

        rows = self._run_returning(sql, values)
        if not rows:
            raise ExecutionError(f"Insert into {table} returned no row", statement=sql)
        logger.info(f"Inserted row into {table}")
        return rows[0]

    def update_field(
        self, table: str, row_id: Any, column: str, raw_value: Any
    ) -> Dict[str, Any]:
        """Set one column of one row and return the updated row.

        Raises:
            ValidationError: If the column is unknown or the table has no
                single primary key
            RowNotFoundError: If no row has the given key
        """
        columns = self.introspector.describe(table)
        key = self.introspector.primary_key(table, columns)
        target = self._require_column(table, columns, column)
        key_value = self._coerce_row_id(table, key, row_id)
        value = coerce_value(raw_value, target.family)

        sql = (
            f"UPDATE {self.datasource.quote(table, 'table')} "
            f"SET {self.datasource.quote(target.name, 'column')} = {self.datasource.placeholder} "
            f"WHERE {self.datasource.quote(key.name, 'column')} = {self.datasource.placeholder} "
            f"RETURNING *"
        )
        rows = self._run_returning(sql, [value, key_value])
        if not rows:
            raise RowNotFoundError(table, row_id)
        logger.info(f"Updated {table}.{target.name} for row {key_value!r}")
        return rows[0]

    def delete(self, table: str, row_id: Any) -> None:
        """Delete one row by primary key.

        Raises:
            RowNotFoundError: If the engine reports no row deleted
        """
        columns = self.introspector.describe(table)
        key = self.introspector.primary_key(table, columns)
        key_value = self._coerce_row_id(table, key, row_id)

        sql = (
            f"DELETE FROM {self.datasource.quote(table, 'table')} "
            f"WHERE {self.datasource.quote(key.name, 'column')} = {self.datasource.placeholder}"
        )
        count = self.datasource.run_mutation(sql, [key_value])
        if count == 0:
            raise RowNotFoundError(table, row_id)
        logger.info(f"Deleted row {key_value!r} from {table}")

    def _require_column(
        self, table: str, columns: List[ColumnDescriptor], name: str
    ) -> ColumnDescriptor:
        validate_identifier(name, "column")
        column = find_column(columns, name)
        if column is None:
            raise ValidationError(f"Unknown column {name!r} for table {table}")
        return column

    def _coerce_row_id(self, table: str, key: ColumnDescriptor, row_id: Any) -> Any:
        value = coerce_value(row_id, key.family)
        if value is None:
            raise ValidationError(f"Invalid row id {row_id!r} for {table}.{key.name}")
        return value

    def _run_returning(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        return project_table(self.datasource.run_query(sql, params)).rows
