"""SQLite data source implementation."""

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

import pyarrow as pa

from ..errors import ExecutionError
from .base import (
    DataSource,
    TableMetadata,
    ColumnMetadata,
    empty_result,
    rows_to_arrow,
)

logger = logging.getLogger(__name__)


class SQLiteDataSource(DataSource):
    """SQLite data source connector.

    The connection runs in autocommit mode, so each statement is applied
    as soon as it completes.
    """

    dialect = "sqlite"
    placeholder = "?"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize SQLite data source.

        Config should include:
            - path: Path to the database file (or :memory: for in-memory)
        """
        super().__init__(name, config)
        self.db_path = config.get("path", ":memory:")

    def connect(self) -> None:
        """Open the SQLite database."""
        logger.info(f"Connecting to SQLite at '{self.db_path}'")
        self.connection = sqlite3.connect(
            self.db_path, isolation_level=None, check_same_thread=False
        )
        self._connected = True
        logger.info(f"Successfully connected to SQLite: {self.name}")

    def disconnect(self) -> None:
        """Close the SQLite connection."""
        if self.connection:
            self.connection.close()
            logger.info(f"Disconnected from SQLite: {self.name}")
            self.connection = None
            self._connected = False

    def list_tables(self) -> List[str]:
        """List user tables, skipping SQLite and migration bookkeeping."""
        cursor = self.connection.execute(
            """
            SELECT name
            FROM sqlite_master
            WHERE type = 'table'
              AND name NOT LIKE 'sqlite_%'
              AND name != '_prisma_migrations'
            ORDER BY name
            """
        )
        tables = []
        for row in cursor.fetchall():
            tables.append(row[0])
        return tables

    def get_table_metadata(self, table: str) -> TableMetadata:
        """Get table metadata from PRAGMA table_info."""
        quoted = self.quote(table, "table")
        cursor = self.connection.execute(f"PRAGMA table_info({quoted})")

        columns = []
        for row in cursor.fetchall():
            # cid, name, type, notnull, dflt_value, pk
            columns.append(
                ColumnMetadata(
                    name=row[1],
                    data_type=row[2],
                    nullable=not row[3],
                    primary_key=row[5] > 0,
                )
            )
        return TableMetadata(schema_name="main", table_name=table, columns=columns)

    def run_query(self, sql: str, params: Optional[Sequence[Any]] = None) -> pa.Table:
        """Execute query and return an Arrow table."""
        logger.debug(f"Executing query on {self.name}: {sql[:100]}...")
        try:
            cursor = self.connection.execute(sql, list(params or []))
            if cursor.description is None:
                return empty_result()
            columns = self._extract_column_names(cursor.description)
            rows = cursor.fetchall()
        except (sqlite3.Error, sqlite3.Warning) as e:
            logger.error(f"Query execution failed on {self.name}: {e}")
            raise ExecutionError(str(e), statement=sql) from e
        return rows_to_arrow(columns, rows)

    def run_mutation(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a mutation and return the affected row count."""
        logger.debug(f"Executing mutation on {self.name}: {sql[:100]}...")
        try:
            cursor = self.connection.execute(sql, list(params or []))
        except (sqlite3.Error, sqlite3.Warning) as e:
            logger.error(f"Mutation failed on {self.name}: {e}")
            raise ExecutionError(str(e), statement=sql) from e
        # DDL reports -1
        return max(cursor.rowcount, 0)

    def _extract_column_names(self, description) -> List[str]:
        """Extract column names from cursor description."""
        columns = []
        for desc in description:
            columns.append(desc[0])
        return columns
