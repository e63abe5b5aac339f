"""Column and table snapshot metadata."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .types import TypeFamily, map_type


@dataclass(frozen=True)
class ColumnDescriptor:
    """Introspected column metadata."""

    name: str
    declared_type: str
    is_primary_key: bool = False
    nullable: bool = True
    family: Optional[TypeFamily] = None

    def __post_init__(self):
        if self.family is None:
            object.__setattr__(self, "family", map_type(self.declared_type))

    def __repr__(self) -> str:
        marker = " pk" if self.is_primary_key else ""
        return f"Column({self.name}, {self.declared_type}{marker})"


@dataclass
class TableSnapshot:
    """Columns and rows of a table at fetch time."""

    table: str
    columns: List[ColumnDescriptor] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)

    def get_column(self, name: str) -> Optional[ColumnDescriptor]:
        """Get column by name."""
        return find_column(self.columns, name)

    def column_names(self) -> List[str]:
        names = []
        for col in self.columns:
            names.append(col.name)
        return names

    def __repr__(self) -> str:
        return f"TableSnapshot({self.table}, cols={len(self.columns)}, rows={len(self.rows)})"


def find_column(
    columns: List[ColumnDescriptor], name: str
) -> Optional[ColumnDescriptor]:
    """Find a column by exact name, then case-insensitively."""
    for col in columns:
        if col.name == name:
            return col
    for col in columns:
        if col.name.lower() == name.lower():
            return col
    return None
