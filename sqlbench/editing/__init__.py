"""Client-side row editing state."""

from .session import TableEditSession, RowState, PendingEdit, same_value

__all__ = ["TableEditSession", "RowState", "PendingEdit", "same_value"]
