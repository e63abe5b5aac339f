"""Project Arrow results into JSON-safe column/row structures."""

import datetime
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Sequence

import pyarrow as pa

# Largest integer a double-precision float holds exactly.
MAX_SAFE_INTEGER = 2**53 - 1

DEFAULT_HIDDEN_COLUMNS = ("createdAt", "updatedAt")


@dataclass
class ResultSet:
    """Column names plus rows keyed by column name."""

    columns: List[str] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def __repr__(self) -> str:
        return f"ResultSet(cols={len(self.columns)}, rows={len(self.rows)})"


def normalize_value(value: Any) -> Any:
    """Convert a database value into a JSON-representable one.

    Integers beyond the exact range of a double become floats, so
    precision past 2**53 is lost.
    """
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        if abs(value) > MAX_SAFE_INTEGER:
            return float(value)
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime.date, datetime.datetime, datetime.time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return value


def project_table(table: pa.Table) -> ResultSet:
    """Convert an Arrow table into a ResultSet.

    Args:
        table: Raw engine result

    Returns:
        ResultSet whose rows hold normalized values in column order
    """
    columns = list(table.schema.names)
    column_values = []
    for index in range(table.num_columns):
        column_values.append(table.column(index).to_pylist())

    rows: List[Dict[str, Any]] = []
    for row_index in range(table.num_rows):
        row: Dict[str, Any] = {}
        for col_index, name in enumerate(columns):
            row[name] = normalize_value(column_values[col_index][row_index])
        rows.append(row)
    return ResultSet(columns=columns, rows=rows)


def hide_audit_columns(columns: Sequence, hidden: Sequence[str] = DEFAULT_HIDDEN_COLUMNS) -> List:
    """Drop audit columns before display.

    Accepts plain names or objects with a ``name`` attribute.
    """
    visible = []
    for col in columns:
        name = getattr(col, "name", col)
        if name not in hidden:
            visible.append(col)
    return visible
