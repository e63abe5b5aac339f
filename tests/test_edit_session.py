"""Tests for the client-side edit state machine."""

import pytest

from sqlbench.editing import RowState, TableEditSession, same_value
from sqlbench.errors import ExecutionError, RowNotFoundError, ValidationError
from sqlbench.repository import RowRepository


class RecordingRepository(RowRepository):
    """Row repository that records update calls and can be told to fail."""

    def __init__(self, datasource):
        super().__init__(datasource)
        self.updates = []
        self.fail_updates = False

    def update_field(self, table, row_id, column, raw_value):
        self.updates.append((table, row_id, column, raw_value))
        if self.fail_updates:
            raise ExecutionError("database is locked")
        return super().update_field(table, row_id, column, raw_value)


@pytest.fixture
def repository(sqlite_datasource):
    return RecordingRepository(sqlite_datasource)


@pytest.fixture
def session(repository):
    session = TableEditSession(repository, "users")
    session.load()
    return session


def test_loaded_rows_are_committed(session):
    assert session.key_column.name == "id"
    assert session.state_of(1) == RowState.COMMITTED
    assert session.state_of(2) == RowState.COMMITTED


def test_edit_then_commit(session, repository):
    assert session.edit_cell(1, "name", "Ada") == RowState.PENDING_LOCAL
    assert session.state_of(1) == RowState.PENDING_LOCAL
    assert session.rows[0]["name"] == "Ada"

    assert session.commit_cell(1, "name") == RowState.COMMITTED

    assert repository.updates == [("users", 1, "name", "Ada")]
    assert repository.list("users").rows[0]["name"] == "Ada"
    assert session.rows[0]["name"] == "Ada"


def test_row_ids_may_be_strings(session):
    session.edit_cell("2", "score", "1.5")
    session.commit_cell("2", "score")

    assert session.rows[1]["score"] == 1.5


def test_unchanged_value_skips_round_trip(session, repository):
    session.edit_cell(1, "name", "Grace")

    assert session.commit_cell(1, "name") == RowState.COMMITTED
    assert repository.updates == []


def test_same_type_required_for_skip(session, repository):
    """Committed 9.5 (float) and coerced 9.5 match; 1 and True do not."""
    session.edit_cell(1, "score", "9.5")
    session.commit_cell(1, "score")
    assert repository.updates == []

    session.edit_cell(1, "active", "true")
    session.commit_cell(1, "active")
    assert len(repository.updates) == 1


def test_same_value():
    assert same_value(None, None)
    assert same_value("a", "a")
    assert not same_value(1, True)
    assert not same_value(1, 1.0)


def test_failed_commit_reverts_by_refetch(session, repository):
    repository.fail_updates = True
    session.edit_cell(1, "name", "Ada")
    session.edit_cell(2, "name", "Other")

    with pytest.raises(ExecutionError):
        session.commit_cell(1, "name")

    assert session.state_of(1) == RowState.COMMITTED
    assert session.state_of(2) == RowState.COMMITTED
    assert session.rows[0]["name"] == "Grace"
    assert session.rows[1]["name"] == "Linus"


def test_commit_without_pending_edit_is_noop(session, repository):
    assert session.commit_cell(1, "name") == RowState.COMMITTED
    assert repository.updates == []


def test_other_pending_fields_survive_commit(session):
    session.edit_cell(1, "name", "Ada")
    session.edit_cell(1, "score", "1")

    session.commit_cell(1, "name")

    assert session.state_of(1) == RowState.PENDING_LOCAL
    assert [edit.column for edit in session.pending_edits(1)] == ["score"]


def test_drafts_are_saved_in_batch(session, repository):
    draft_id = session.add_draft_row()

    assert draft_id.startswith("temp-")
    assert session.state_of(draft_id) == RowState.DRAFT
    assert session.drafts[draft_id] == {"active": False, "name": "", "score": None}

    session.edit_cell(draft_id, "name", "Neo")
    assert session.commit_cell(draft_id, "name") == RowState.DRAFT
    assert len(repository.list("users").rows) == 2

    assert session.save_drafts() == 1
    assert session.drafts == {}
    names = [row["name"] for row in session.rows]
    assert names == ["Grace", "Linus", "Neo"]
    assert session.state_of(3) == RowState.COMMITTED


def test_draft_save_failure_keeps_remaining_drafts(session, sqlite_datasource):
    first = session.add_draft_row()
    second = session.add_draft_row()
    session.edit_cell(first, "name", "ok")
    session.edit_cell(second, "name", "boom")
    sqlite_datasource.run_mutation(
        "CREATE TRIGGER no_boom BEFORE INSERT ON users WHEN NEW.name = 'boom' "
        "BEGIN SELECT RAISE(ABORT, 'boom rejected'); END"
    )

    with pytest.raises(ExecutionError):
        session.save_drafts()

    assert list(session.drafts) == [second]
    saved = [row for row in session.rows if row["name"] == "ok"]
    assert [row["id"] for row in saved] == [3]
    assert session.state_of(3) == RowState.COMMITTED
    assert session.drafts[second]["name"] == "boom"


def test_delete_row_and_draft(session, repository):
    draft_id = session.add_draft_row()
    session.delete_row(draft_id)
    assert session.drafts == {}

    session.delete_row(2)

    assert [row["id"] for row in session.rows] == [1]
    assert [row["id"] for row in repository.list("users").rows] == [1]


def test_unknown_row_and_column(session):
    with pytest.raises(RowNotFoundError):
        session.state_of(404)
    with pytest.raises(RowNotFoundError):
        session.edit_cell(404, "name", "x")
    with pytest.raises(ValidationError):
        session.edit_cell(1, "email", "x")


def test_audit_columns_are_hidden(sqlite_datasource, repository):
    sqlite_datasource.run_mutation(
        'CREATE TABLE posts (id INTEGER PRIMARY KEY, title TEXT, "createdAt" TEXT, "updatedAt" TEXT)'
    )
    session = TableEditSession(repository, "posts")
    session.load()

    assert [col.name for col in session.columns] == ["id", "title"]
    draft_id = session.add_draft_row()
    assert session.drafts[draft_id] == {"title": ""}


def test_session_must_be_loaded(repository):
    session = TableEditSession(repository, "users")

    with pytest.raises(RuntimeError):
        session.rows


def test_module_source_compiles_without_warnings():
    import warnings

    import sqlbench.editing.session as module

    with open(module.__file__, encoding="utf-8") as handle:
        source = handle.read()
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        compile(source, module.__file__, "exec")
