"""SQL text handling: splitting, classification and identifier safety."""

from .splitter import split_statements
from .classifier import (
    StatementKind,
    classify_statement,
    is_schema_change,
    leading_keyword,
)
from .identifiers import validate_identifier, quote_identifier

__all__ = [
    "split_statements",
    "StatementKind",
    "classify_statement",
    "is_schema_change",
    "leading_keyword",
    "validate_identifier",
    "quote_identifier",
]
