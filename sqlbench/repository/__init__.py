"""Generic row repository."""

from .rows import RowRepository

__all__ = ["RowRepository"]
