"""Allow-list validation and quoting for SQL identifiers.

Engines cannot bind identifiers as parameters, so table and column names
are checked here before they are placed into SQL text. Values never take
this path; they are always bound positionally.
"""

import re

from sqlglot import exp

from ..errors import InvalidIdentifierError

IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]+$")


def validate_identifier(identifier: str, kind: str = "identifier") -> str:
    """Validate a table or column name.

    Args:
        identifier: Name to check
        kind: Label used in the error message ("table", "column", ...)

    Returns:
        The identifier, unchanged

    Raises:
        InvalidIdentifierError: If the name holds anything but letters,
            digits and underscores
    """
    if not isinstance(identifier, str) or not IDENTIFIER_RE.fullmatch(identifier):
        raise InvalidIdentifierError(str(identifier), kind)
    return identifier


def quote_identifier(identifier: str, dialect: str, kind: str = "identifier") -> str:
    """Validate an identifier and render it quoted for a sqlglot dialect."""
    validate_identifier(identifier, kind)
    return exp.to_identifier(identifier, quoted=True).sql(dialect=dialect)
