"""Classify SQL statements by their leading keyword."""

import re
from enum import Enum


class StatementKind(Enum):
    """Expected result shape of a statement."""

    QUERY = "query"
    MUTATING = "mutating"


MUTATING_KEYWORDS = frozenset(
    ["CREATE", "ALTER", "DROP", "INSERT", "UPDATE", "DELETE", "TRUNCATE"]
)
SCHEMA_KEYWORDS = frozenset(["CREATE", "ALTER", "DROP"])

_KEYWORD_RE = re.compile(r"\s*([A-Za-z_]+)")


def leading_keyword(statement: str) -> str:
    """Return the upper-cased first keyword token, or '' if there is none."""
    match = _KEYWORD_RE.match(statement or "")
    if match is None:
        return ""
    return match.group(1).upper()


def classify_statement(statement: str) -> StatementKind:
    """Tag a statement as MUTATING or QUERY.

    Only the first keyword is inspected. Anything that is not a known
    data or schema change is treated as a query.
    """
    if leading_keyword(statement) in MUTATING_KEYWORDS:
        return StatementKind.MUTATING
    return StatementKind.QUERY


def is_schema_change(statement: str) -> bool:
    """Check whether a statement is DDL that may alter the table list."""
    return leading_keyword(statement) in SCHEMA_KEYWORDS
