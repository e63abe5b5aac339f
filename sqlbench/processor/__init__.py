"""Batch execution and result projection."""

from .projector import (
    ResultSet,
    project_table,
    normalize_value,
    hide_audit_columns,
    MAX_SAFE_INTEGER,
)
from .batch_executor import (
    BatchExecutor,
    BatchResult,
    StatementResult,
    StatementFailure,
)

__all__ = [
    "ResultSet",
    "project_table",
    "normalize_value",
    "hide_audit_columns",
    "MAX_SAFE_INTEGER",
    "BatchExecutor",
    "BatchResult",
    "StatementResult",
    "StatementFailure",
]
