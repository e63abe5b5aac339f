"""Exception taxonomy shared by every workbench component."""

from typing import Optional


class SqlBenchError(Exception):
    """Base class for all workbench errors."""

    pass


class InvalidIdentifierError(SqlBenchError, ValueError):
    """Raised when a table or column name fails the identifier allow-list."""

    def __init__(self, identifier: str, kind: str = "identifier"):
        self.identifier = identifier
        self.kind = kind
        super().__init__(f"Invalid {kind} name: {identifier!r}")


class TableNotFoundError(SqlBenchError):
    """Raised when the requested table does not exist."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Table not found: {table}")


class RowNotFoundError(SqlBenchError):
    """Raised when no row matches the given primary key."""

    def __init__(self, table: str, row_id: object):
        self.table = table
        self.row_id = row_id
        super().__init__(f"Row {row_id} not found in table {table}")


class NoStatementsError(SqlBenchError):
    """Raised when a submitted batch contains no statements."""

    def __init__(self):
        super().__init__("No valid SQL statements found.")


class ValidationError(SqlBenchError, ValueError):
    """Raised when a field set does not fit the table schema."""

    pass


class ExecutionError(SqlBenchError):
    """Raised when the database engine rejects or fails a statement.

    The message is the engine's own text, passed through unchanged.
    """

    def __init__(self, message: str, statement: Optional[str] = None):
        self.message = message
        self.statement = statement
        super().__init__(message)
