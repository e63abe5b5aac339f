"""Split a blob of SQL text into individual statements."""

from typing import List, Optional

TERMINATOR = ";"
QUOTE = "'"


def split_statements(blob: Optional[str]) -> List[str]:
    """Split SQL text on statement terminators outside single-quoted literals.

    A doubled quote inside a literal (``'it''s'``) toggles the quote state
    twice, so it never ends the literal. An unterminated literal runs to the
    end of the input and no further terminators are honoured inside it.

    Args:
        blob: Raw SQL text, possibly holding several statements

    Returns:
        Trimmed, non-empty statements in their original order
    """
    if not blob or not blob.strip():
        return []

    pieces: List[str] = []
    start = 0
    in_literal = False
    index = 0
    while index < len(blob):
        char = blob[index]
        if char == QUOTE:
            in_literal = not in_literal
        elif char == TERMINATOR and not in_literal:
            pieces.append(blob[start:index])
            start = index + 1
        index += 1
    pieces.append(blob[start:])

    statements: List[str] = []
    for piece in pieces:
        trimmed = piece.strip()
        if trimmed:
            statements.append(trimmed)
    return statements
