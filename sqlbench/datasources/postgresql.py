"""PostgreSQL data source implementation."""

from typing import Any, Dict, List, Optional, Sequence
import pyarrow as pa
import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor
import logging

from ..errors import ExecutionError
from .base import (
    DataSource,
    TableMetadata,
    ColumnMetadata,
    empty_result,
    rows_to_arrow,
)

logger = logging.getLogger(__name__)


class PostgreSQLDataSource(DataSource):
    """PostgreSQL data source connector with connection pooling.

    Every statement runs on its own pooled connection and is committed
    on success or rolled back on failure.
    """

    dialect = "postgres"
    placeholder = "%s"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize PostgreSQL data source.

        Config should include:
            - host: Database host
            - port: Database port
            - database: Database name
            - user: Username
            - password: Password
            - schema: Schema holding the editable tables (default: public)
            - min_connections: Minimum connections in pool (default: 1)
            - max_connections: Maximum connections in pool (default: 5)
        """
        super().__init__(name, config)
        self.schema = config.get("schema", "public")
        self._pool = None
        self._min_connections = config.get("min_connections", 1)
        self._max_connections = config.get("max_connections", 5)

    def connect(self) -> None:
        """Establish connection pool to PostgreSQL."""
        try:
            logger.info(f"Connecting to PostgreSQL database '{self.config['database']}' at {self.config['host']}")
            self._pool = pool.ThreadedConnectionPool(
                self._min_connections,
                self._max_connections,
                host=self.config["host"],
                port=self.config.get("port", 5432),
                database=self.config["database"],
                user=self.config["user"],
                password=self.config["password"],
            )
            # Get a test connection to verify it works
            conn = self._pool.getconn()
            self._pool.putconn(conn)
            self._connected = True
            logger.info(f"Successfully connected to PostgreSQL: {self.name}")
        except psycopg2.Error as e:
            logger.error(f"Failed to connect to PostgreSQL {self.name}: {e}")
            raise ConnectionError(f"PostgreSQL connection failed: {e}") from e

    def disconnect(self) -> None:
        """Close all connections in the pool."""
        if self._pool:
            self._pool.closeall()
            logger.info(f"Disconnected from PostgreSQL: {self.name}")
            self._pool = None
            self._connected = False

    def _get_connection(self):
        """Get a connection from the pool."""
        if not self._pool:
            raise RuntimeError(f"Not connected to {self.name}")
        return self._pool.getconn()

    def _return_connection(self, conn):
        """Return a connection to the pool."""
        if self._pool:
            self._pool.putconn(conn)

    def list_tables(self) -> List[str]:
        """List tables in the configured schema."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.execute(
                    """
                    SELECT table_name
                    FROM information_schema.tables
                    WHERE table_schema = %s AND table_type = 'BASE TABLE'
                      AND table_name != '_prisma_migrations'
                    ORDER BY table_name
                    """,
                    (self.schema,),
                )
                rows = cursor.fetchall()
                tables = []
                for row in rows:
                    tables.append(row[0])
                return tables
        except psycopg2.Error as e:
            logger.error(f"Error listing tables in schema {self.schema}: {e}")
            raise ExecutionError(str(e)) from e
        finally:
            conn.rollback()
            self._return_connection(conn)

    def get_table_metadata(self, table: str) -> TableMetadata:
        """Get table metadata from information_schema."""
        conn = self._get_connection()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(
                    """
                    SELECT
                        column_name,
                        data_type,
                        is_nullable
                    FROM information_schema.columns
                    WHERE table_schema = %s AND table_name = %s
                    ORDER BY ordinal_position
                    """,
                    (self.schema, table),
                )
                column_rows = cursor.fetchall()

                cursor.execute(
                    """
                    SELECT kcu.column_name
                    FROM information_schema.table_constraints tc
                    JOIN information_schema.key_column_usage kcu
                      ON tc.constraint_name = kcu.constraint_name
                     AND tc.table_schema = kcu.table_schema
                    WHERE tc.constraint_type = 'PRIMARY KEY'
                      AND tc.table_schema = %s AND tc.table_name = %s
                    """,
                    (self.schema, table),
                )
                key_columns = set()
                for row in cursor.fetchall():
                    key_columns.add(row["column_name"])

                columns = []
                for row in column_rows:
                    columns.append(
                        ColumnMetadata(
                            name=row["column_name"],
                            data_type=row["data_type"],
                            nullable=row["is_nullable"] == "YES",
                            primary_key=row["column_name"] in key_columns,
                        )
                    )

                return TableMetadata(
                    schema_name=self.schema, table_name=table, columns=columns
                )
        except psycopg2.Error as e:
            logger.error(f"Error getting metadata for {self.schema}.{table}: {e}")
            raise ExecutionError(str(e)) from e
        finally:
            conn.rollback()
            self._return_connection(conn)

    def run_query(self, sql: str, params: Optional[Sequence[Any]] = None) -> pa.Table:
        """Execute query and return an Arrow table."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                logger.debug(f"Executing query on {self.name}: {sql[:100]}...")
                self._execute(cursor, sql, params)
                if cursor.description is None:
                    table = empty_result()
                else:
                    columns = self._extract_column_names(cursor.description)
                    table = rows_to_arrow(columns, cursor.fetchall())
            conn.commit()
            return table
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Query execution failed on {self.name}: {e}")
            raise ExecutionError(self._message(e), statement=sql) from e
        finally:
            self._return_connection(conn)

    def run_mutation(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a mutation and return the affected row count."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                logger.debug(f"Executing mutation on {self.name}: {sql[:100]}...")
                self._execute(cursor, sql, params)
                count = max(cursor.rowcount, 0)
            conn.commit()
            return count
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Mutation failed on {self.name}: {e}")
            raise ExecutionError(self._message(e), statement=sql) from e
        finally:
            self._return_connection(conn)

    def _execute(self, cursor, sql: str, params: Optional[Sequence[Any]]) -> None:
        # Without params psycopg2 leaves '%' in ad-hoc SQL untouched.
        if params:
            cursor.execute(sql, tuple(params))
        else:
            cursor.execute(sql)

    def _message(self, error: psycopg2.Error) -> str:
        if error.pgerror:
            return error.pgerror.strip()
        return str(error)

    def _extract_column_names(self, description) -> List[str]:
        """Extract column names from cursor description."""
        columns = []
        for desc in description:
            columns.append(desc[0])
        return columns
