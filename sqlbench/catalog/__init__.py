"""Catalog metadata, type families and schema introspection."""

from .types import TypeFamily, map_type, coerce_value, coerce
from .schema import ColumnDescriptor, TableSnapshot, find_column
from .introspector import SchemaIntrospector

__all__ = [
    "TypeFamily",
    "map_type",
    "coerce_value",
    "coerce",
    "ColumnDescriptor",
    "TableSnapshot",
    "find_column",
    "SchemaIntrospector",
]
