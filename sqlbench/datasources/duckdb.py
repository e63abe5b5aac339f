"""DuckDB data source implementation."""

from typing import Any, Dict, List, Optional, Sequence
import pyarrow as pa
import duckdb
import logging

from ..errors import ExecutionError
from .base import (
    DataSource,
    TableMetadata,
    ColumnMetadata,
)

logger = logging.getLogger(__name__)


class DuckDBDataSource(DataSource):
    """DuckDB data source connector."""

    dialect = "duckdb"
    placeholder = "?"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize DuckDB data source.

        Config should include:
            - path: Path to DuckDB database file (or :memory: for in-memory)
            - read_only: Whether to open in read-only mode (default: False)
            - schema: Schema holding the editable tables (default: main)
        """
        super().__init__(name, config)
        self.connection = None
        self.db_path = config.get("path", ":memory:")
        self.read_only = config.get("read_only", False)
        self.schema = config.get("schema", "main")

    def connect(self) -> None:
        """Establish connection to DuckDB."""
        logger.info(f"Connecting to DuckDB at '{self.db_path}'")
        self.connection = duckdb.connect(self.db_path, read_only=self.read_only)
        self._connected = True
        logger.info(f"Successfully connected to DuckDB: {self.name}")

    def disconnect(self) -> None:
        """Close DuckDB connection."""
        if self.connection:
            self.connection.close()
            logger.info(f"Disconnected from DuckDB: {self.name}")
            self.connection = None
            self._connected = False

    def list_tables(self) -> List[str]:
        """List tables in the configured schema."""
        result = self.connection.execute(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = ? AND table_type = 'BASE TABLE'
              AND table_name != '_prisma_migrations'
            ORDER BY table_name
            """,
            [self.schema],
        ).fetchall()
        tables = []
        for row in result:
            tables.append(row[0])
        return tables

    def get_table_metadata(self, table: str) -> TableMetadata:
        """Get table metadata.

        DuckDB resolves identifiers case-insensitively, so ``table`` is
        matched the same way and reported under its stored name.
        """
        result = self.connection.execute(
            """
            SELECT
                table_name,
                column_name,
                data_type,
                is_nullable
            FROM information_schema.columns
            WHERE table_schema = ? AND lower(table_name) = lower(?)
            ORDER BY ordinal_position
            """,
            [self.schema, table],
        ).fetchall()
        if not result:
            return TableMetadata(schema_name=self.schema, table_name=table, columns=[])

        stored_name = result[0][0]
        key_columns = self._primary_key_columns(stored_name)
        columns = []
        for row in result:
            if row[0] != stored_name:
                continue
            columns.append(
                ColumnMetadata(
                    name=row[1],
                    data_type=row[2],
                    nullable=row[3] == "YES",
                    primary_key=row[1] in key_columns,
                )
            )

        return TableMetadata(schema_name=self.schema, table_name=stored_name, columns=columns)

    def _primary_key_columns(self, table: str) -> List[str]:
        """Read primary-key column names from duckdb_constraints()."""
        result = self.connection.execute(
            """
            SELECT constraint_column_names
            FROM duckdb_constraints()
            WHERE schema_name = ? AND table_name = ?
              AND constraint_type = 'PRIMARY KEY'
            """,
            [self.schema, table],
        ).fetchall()
        names = []
        for row in result:
            names.extend(row[0])
        return names

    def run_query(self, sql: str, params: Optional[Sequence[Any]] = None) -> pa.Table:
        """Execute query and return an Arrow table."""
        logger.debug(f"Executing query on {self.name}: {sql[:100]}...")
        try:
            result = self._execute(sql, params)
            return result.fetch_arrow_table()
        except duckdb.Error as e:
            logger.error(f"Query execution failed on {self.name}: {e}")
            raise ExecutionError(str(e), statement=sql) from e

    def run_mutation(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a mutation and return the affected row count.

        DuckDB reports DML counts as a single-row ``Count`` result.
        """
        logger.debug(f"Executing mutation on {self.name}: {sql[:100]}...")
        try:
            result = self._execute(sql, params)
            if result.description is None:
                return 0
            rows = result.fetchall()
        except duckdb.Error as e:
            logger.error(f"Mutation failed on {self.name}: {e}")
            raise ExecutionError(str(e), statement=sql) from e
        if rows and isinstance(rows[0][0], int):
            return max(rows[0][0], 0)
        return 0

    def _execute(self, sql: str, params: Optional[Sequence[Any]]):
        if params:
            return self.connection.execute(sql, list(params))
        return self.connection.execute(sql)
