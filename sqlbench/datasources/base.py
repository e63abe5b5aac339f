"""Base data source interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import pyarrow as pa

from ..sql.identifiers import quote_identifier


@dataclass
class ColumnMetadata:
    """Metadata about a column."""

    name: str
    data_type: str
    nullable: bool
    primary_key: bool = False


@dataclass
class TableMetadata:
    """Metadata about a table."""

    schema_name: str
    table_name: str
    columns: List[ColumnMetadata]


class DataSource(ABC):
    """Abstract base class for data sources.

    Values are always bound positionally using ``placeholder``; only
    validated identifiers are ever placed into SQL text.
    """

    dialect = "postgres"
    placeholder = "?"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize data source.

        Args:
            name: Unique name for this data source
            config: Configuration dictionary
        """
        self.name = name
        self.config = config
        self.connection = None
        self._connected = False

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data source."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to the data source."""
        pass

    @abstractmethod
    def list_tables(self) -> List[str]:
        """List user tables.

        Returns:
            List of table names
        """
        pass

    @abstractmethod
    def get_table_metadata(self, table: str) -> TableMetadata:
        """Get metadata for a table.

        Args:
            table: Table name, already validated

        Returns:
            Table metadata with columns in native order. A missing table
            yields metadata with no columns.
        """
        pass

    @abstractmethod
    def run_query(self, sql: str, params: Optional[Sequence[Any]] = None) -> pa.Table:
        """Execute a row-returning statement.

        Args:
            sql: SQL statement
            params: Positional bind values

        Returns:
            Arrow table with the result rows. Statements that return no
            row shape give a table with no columns.

        Raises:
            ExecutionError: If the engine rejects the statement
        """
        pass

    @abstractmethod
    def run_mutation(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a data or schema changing statement.

        Args:
            sql: SQL statement
            params: Positional bind values

        Returns:
            Number of affected rows, 0 when the engine reports none

        Raises:
            ExecutionError: If the engine rejects the statement
        """
        pass

    def quote(self, identifier: str, kind: str = "identifier") -> str:
        """Validate and quote an identifier for this engine."""
        return quote_identifier(identifier, self.dialect, kind)

    def placeholders(self, count: int) -> str:
        """Comma-separated bind markers for ``count`` values."""
        return ", ".join([self.placeholder] * count)

    def is_connected(self) -> bool:
        """Check if data source is connected.

        Returns:
            True if connected, False otherwise
        """
        return self._connected

    def ensure_connected(self) -> None:
        """Ensure data source is connected.

        Raises:
            ConnectionError: If connection cannot be established
        """
        if not self.is_connected():
            self.connect()
            self._connected = True

    def __enter__(self):
        """Context manager entry."""
        self.ensure_connected()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
        self._connected = False
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"


def empty_result() -> pa.Table:
    """Arrow table for statements that produce no row shape."""
    return pa.table({})


def rows_to_arrow(columns: List[str], rows: Sequence[Sequence[Any]]) -> pa.Table:
    """Build an Arrow table from DB-API rows.

    Columns whose values Arrow cannot infer one type for (SQLite allows
    mixed types per column) are carried as strings.
    """
    arrays = []
    for index in range(len(columns)):
        values = []
        for row in rows:
            values.append(row[index])
        arrays.append(_to_array(values))
    return pa.Table.from_arrays(arrays, names=list(columns))


def _to_array(values: List[Any]) -> pa.Array:
    try:
        return pa.array(values)
    except (pa.ArrowInvalid, pa.ArrowTypeError):
        text_values = []
        for value in values:
            text_values.append(None if value is None else str(value))
        return pa.array(text_values, type=pa.string())
