"""Type families and client value coercion."""

import math
import re
from enum import Enum
from typing import Any, Optional, Union


class TypeFamily(Enum):
    """Storage type families that drive value coercion."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOATING = "floating"
    TEXT = "text"


_BOOLEAN_NAMES = frozenset(["BOOL", "BOOLEAN", "LOGICAL"])
_INTEGER_NAMES = frozenset(
    [
        "INT", "INTEGER", "TINYINT", "SMALLINT", "MEDIUMINT", "BIGINT", "HUGEINT",
        "UTINYINT", "USMALLINT", "UINTEGER", "UBIGINT", "UHUGEINT",
        "SERIAL", "SMALLSERIAL", "BIGSERIAL", "LONG",
    ]
)
_FLOATING_NAMES = frozenset(
    ["FLOAT", "REAL", "DOUBLE", "DECIMAL", "NUMERIC", "NUMBER", "MONEY"]
)

_TYPE_WORD_RE = re.compile(r"[A-Z]+")

TRUE_TOKENS = frozenset(["true", "1", "t", "yes"])
FALSE_TOKENS = frozenset(["false", "0", "f", "no"])


def map_type(native_type: Optional[str]) -> TypeFamily:
    """Map an engine-native type name to its family.

    Only the first word of the name is considered, so ``DOUBLE PRECISION``,
    ``INT4`` and ``VARCHAR(255)`` resolve through ``DOUBLE``, ``INT`` and
    ``VARCHAR``. Names with no known family fall back to TEXT.

    Args:
        native_type: Type name as reported by the engine catalog

    Returns:
        The matching TypeFamily
    """
    if not native_type:
        return TypeFamily.TEXT
    match = _TYPE_WORD_RE.search(native_type.upper())
    if match is None:
        return TypeFamily.TEXT
    word = match.group(0)

    if word in _BOOLEAN_NAMES:
        return TypeFamily.BOOLEAN
    if word in _INTEGER_NAMES:
        return TypeFamily.INTEGER
    if word in _FLOATING_NAMES:
        return TypeFamily.FLOATING
    return TypeFamily.TEXT


def is_null_token(raw: Any) -> bool:
    """Check whether a raw client value means NULL."""
    if raw is None:
        return True
    text = str(raw)
    return text == "" or text.lower() == "null"


def coerce_value(raw: Any, family: TypeFamily) -> Union[None, bool, int, float, str]:
    """Convert an untyped client value into a storage-typed value.

    Args:
        raw: Value as entered by the client, usually a string
        family: Type family of the target column

    Returns:
        None, bool, int, float or str depending on the family
    """
    if is_null_token(raw):
        return None
    text = raw if isinstance(raw, str) else str(raw)

    if family == TypeFamily.BOOLEAN:
        lowered = text.strip().lower()
        if lowered in TRUE_TOKENS:
            return True
        if lowered in FALSE_TOKENS:
            return False
        return bool(text)

    if family in (TypeFamily.INTEGER, TypeFamily.FLOATING):
        return _coerce_number(text.strip(), family)

    return text


def _coerce_number(text: str, family: TypeFamily) -> Union[None, int, float]:
    if family == TypeFamily.INTEGER:
        try:
            return int(text)
        except ValueError:
            pass
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    if family == TypeFamily.INTEGER:
        return int(number)
    return number


def coerce(raw: Any, declared_type: str) -> Union[None, bool, int, float, str]:
    """Coerce a raw value against a declared type name."""
    return coerce_value(raw, map_type(declared_type))
