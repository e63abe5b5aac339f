r"""Client-side row editing on top of the row repository.

Rows move through a small state machine::

    COMMITTED --edit--> PENDING_LOCAL --commit--> SAVING --ok--> COMMITTED
                                                   \--error--> refetch (COMMITTED)
    DRAFT --save_drafts--> COMMITTED

Pending edits and drafts live only in this object; the database holds the
committed rows.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..catalog.introspector import SchemaIntrospector
from ..catalog.schema import ColumnDescriptor, TableSnapshot
from ..catalog.types import TypeFamily, coerce_value
from ..errors import RowNotFoundError, SqlBenchError, ValidationError
from ..processor.projector import DEFAULT_HIDDEN_COLUMNS, hide_audit_columns
from ..repository.rows import RowRepository

logger = logging.getLogger(__name__)

DRAFT_PREFIX = "temp-"


class RowState(Enum):
    """Editing state of a row as seen by the client."""

    COMMITTED = "committed"
    PENDING_LOCAL = "pending_local"
    SAVING = "saving"
    DRAFT = "draft"


@dataclass
class PendingEdit:
    """A field value entered by the user but not yet saved."""

    row_id: Any
    column: str
    raw_value: Any


def same_value(committed: Any, candidate: Any) -> bool:
    """Equal by value and by type, so 1 and True differ."""
    return type(committed) is type(candidate) and committed == candidate


class TableEditSession:
    """Tracks committed rows, pending cell edits and draft rows of one table."""

    def __init__(
        self,
        repository: RowRepository,
        table: str,
        hidden_columns: Sequence[str] = DEFAULT_HIDDEN_COLUMNS,
    ):
        self.repository = repository
        self.table = table
        self.hidden_columns = tuple(hidden_columns)
        self.snapshot: Optional[TableSnapshot] = None
        self.key_column: Optional[ColumnDescriptor] = None
        self._pending: Dict[Any, Dict[str, PendingEdit]] = {}
        self._saving: set = set()
        self._drafts: Dict[str, Dict[str, Any]] = {}
        self._draft_counter = 0

    def load(self) -> TableSnapshot:
        """Refetch the table, dropping pending edits and drafts."""
        snapshot = self.repository.list(self.table)
        self.snapshot = snapshot
        self._pending.clear()
        self._saving.clear()
        self._drafts.clear()
        try:
            self.key_column = SchemaIntrospector.primary_key(self.table, snapshot.columns)
        except ValidationError:
            self.key_column = None
        return snapshot

    @property
    def columns(self) -> List[ColumnDescriptor]:
        """Columns to display, audit columns removed."""
        return hide_audit_columns(self._require_snapshot().columns, self.hidden_columns)

    @property
    def rows(self) -> List[Dict[str, Any]]:
        """Committed rows with pending edits laid over them."""
        rows = []
        for row in self._require_snapshot().rows:
            merged = dict(row)
            for edit in self._pending.get(self._row_key(row), {}).values():
                merged[edit.column] = edit.raw_value
            rows.append(merged)
        return rows

    @property
    def drafts(self) -> Dict[str, Dict[str, Any]]:
        copies = {}
        for draft_id, values in self._drafts.items():
            copies[draft_id] = dict(values)
        return copies

    def state_of(self, row_id: Any) -> RowState:
        """Current state of a row or draft.

        Raises:
            RowNotFoundError: If the session knows no such row
        """
        if row_id in self._drafts:
            return RowState.DRAFT
        key = self._resolve_row_id(row_id)
        if key in self._saving:
            return RowState.SAVING
        if self._pending.get(key):
            return RowState.PENDING_LOCAL
        return RowState.COMMITTED

    def pending_edits(self, row_id: Any) -> List[PendingEdit]:
        key = self._resolve_row_id(row_id)
        return list(self._pending.get(key, {}).values())

    def edit_cell(self, row_id: Any, column: str, raw_value: Any) -> RowState:
        """Record a user edit without sending it."""
        target = self._require_column(column)
        if row_id in self._drafts:
            self._drafts[row_id][target.name] = raw_value
            return RowState.DRAFT
        self._require_key_column()
        key = self._resolve_row_id(row_id)
        edits = self._pending.setdefault(key, {})
        edits[target.name] = PendingEdit(row_id=key, column=target.name, raw_value=raw_value)
        return RowState.PENDING_LOCAL

    def commit_cell(self, row_id: Any, column: str) -> RowState:
        """Save the pending edit of one cell.

        A value equal to the committed one is dropped without a round trip.
        On failure the table is refetched, discarding every pending edit,
        and the error is re-raised.
        """
        if row_id in self._drafts:
            # Drafts are only saved through save_drafts()
            return RowState.DRAFT
        target = self._require_column(column)
        key = self._resolve_row_id(row_id)
        edits = self._pending.get(key, {})
        edit = edits.pop(target.name, None)
        if not edits:
            self._pending.pop(key, None)
        if edit is None:
            return self.state_of(key)

        row = self._find_row(key)
        candidate = coerce_value(edit.raw_value, target.family)
        if same_value(row.get(target.name), candidate):
            logger.debug(f"Skipping unchanged {self.table}.{target.name} for row {key!r}")
            return self.state_of(key)

        self._saving.add(key)
        try:
            updated = self.repository.update_field(self.table, key, target.name, edit.raw_value)
        except SqlBenchError as exc:
            logger.warning(f"Update failed for row {key!r}, reverting: {exc}")
            self._saving.discard(key)
            self.load()
            raise
        self._saving.discard(key)
        row.update(updated)
        return self.state_of(key)

    def add_draft_row(self) -> str:
        """Start a new unsaved row and return its temporary id."""
        self._draft_counter += 1
        draft_id = f"{DRAFT_PREFIX}{self._draft_counter}"
        values: Dict[str, Any] = {}
        for col in self.columns:
            if col.is_primary_key:
                continue
            if col.family in (TypeFamily.INTEGER, TypeFamily.FLOATING):
                values[col.name] = None
            elif col.family == TypeFamily.BOOLEAN:
                values[col.name] = False
            else:
                values[col.name] = ""
        self._drafts[draft_id] = values
        return draft_id

    def save_drafts(self) -> int:
        """Insert every draft in creation order, then refetch.

        The first failing insert stops the run and is re-raised; drafts
        saved before it stay saved and are no longer drafts.

        Returns:
            Number of drafts inserted
        """
        snapshot = self._require_snapshot()
        saved = 0
        for draft_id in list(self._drafts):
            values = self._drafts[draft_id]
            try:
                inserted = self.repository.insert(self.table, values)
            except SqlBenchError as exc:
                logger.warning(f"Saving draft {draft_id} failed after {saved} saved: {exc}")
                raise
            del self._drafts[draft_id]
            snapshot.rows.append(inserted)
            saved += 1
        if saved:
            logger.info(f"Saved {saved} new row(s) to {self.table}")
        self.load()
        return saved

    def delete_row(self, row_id: Any) -> None:
        """Delete a committed row, or discard a draft."""
        if row_id in self._drafts:
            del self._drafts[row_id]
            return
        self._require_key_column()
        key = self._resolve_row_id(row_id)
        self.repository.delete(self.table, key)
        self._pending.pop(key, None)
        snapshot = self._require_snapshot()
        remaining = []
        for row in snapshot.rows:
            if self._row_key(row) != key:
                remaining.append(row)
        snapshot.rows = remaining

    def _require_snapshot(self) -> TableSnapshot:
        if self.snapshot is None:
            raise RuntimeError(f"Edit session for {self.table} is not loaded")
        return self.snapshot

    def _require_key_column(self) -> ColumnDescriptor:
        self._require_snapshot()
        if self.key_column is None:
            raise ValidationError(f"Table {self.table} has no single primary key")
        return self.key_column

    def _require_column(self, name: str) -> ColumnDescriptor:
        column = self._require_snapshot().get_column(name)
        if column is None:
            raise ValidationError(f"Unknown column {name!r} for table {self.table}")
        return column

    def _row_key(self, row: Dict[str, Any]) -> Any:
        if self.key_column is None:
            return None
        return row.get(self.key_column.name)

    def _find_row(self, row_id: Any) -> Optional[Dict[str, Any]]:
        for row in self._require_snapshot().rows:
            key = self._row_key(row)
            if key is None:
                continue
            if key == row_id or str(key) == str(row_id):
                return row
        return None

    def _resolve_row_id(self, row_id: Any) -> Any:
        row = self._find_row(row_id)
        if row is None:
            raise RowNotFoundError(self.table, row_id)
        return self._row_key(row)
