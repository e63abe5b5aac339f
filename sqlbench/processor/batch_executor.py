"""Sequential execution of multi-statement SQL batches."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from ..datasources.base import DataSource
from ..errors import ExecutionError, NoStatementsError
from ..sql import StatementKind, classify_statement, is_schema_change, split_statements
from ..utils.logging import get_contextual_logger
from .projector import ResultSet, project_table


@dataclass
class StatementResult:
    """Outcome of one statement that ran to completion."""

    statement: str
    kind: StatementKind
    result_set: Optional[ResultSet] = None
    affected_rows: Optional[int] = None

    @property
    def has_rows(self) -> bool:
        """True when the statement produced a row shape."""
        return self.result_set is not None and bool(self.result_set.columns)


@dataclass
class StatementFailure:
    """The statement that stopped a batch and the engine's message."""

    index: int
    statement: str
    message: str


@dataclass
class BatchResult:
    """Aggregate outcome of a batch.

    Only the last completed statement's shape is reported. Row sets of
    earlier queries are dropped, and only mutations contribute to
    ``total_affected_rows``.
    """

    statements: List[str]
    executed: List[StatementResult] = field(default_factory=list)
    total_affected_rows: int = 0
    failure: Optional[StatementFailure] = None
    schema_may_have_changed: bool = False

    def record(self, outcome: StatementResult) -> None:
        """Add a completed statement to the aggregate."""
        self.executed.append(outcome)
        if outcome.affected_rows:
            self.total_affected_rows += outcome.affected_rows
        if is_schema_change(outcome.statement):
            self.schema_may_have_changed = True

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @property
    def last_result(self) -> Optional[StatementResult]:
        if not self.executed:
            return None
        return self.executed[-1]

    @property
    def result_set(self) -> Optional[ResultSet]:
        """Rows of the final statement, when it was a row-producing query."""
        last = self.last_result
        if self.failure is not None or last is None:
            return None
        if last.kind == StatementKind.QUERY and last.has_rows:
            return last.result_set
        return None

    @property
    def message(self) -> str:
        """Human-readable summary of the batch."""
        if self.failure is not None:
            return (
                f'Query execution failed on statement: "{self.failure.statement}". '
                f"Error: {self.failure.message}"
            )
        result_set = self.result_set
        if result_set is not None:
            return f"Results ({result_set.row_count} rows)"
        last = self.last_result
        if last is not None and is_schema_change(last.statement):
            return "DDL command(s) executed successfully."
        if len(self.executed) > 1:
            return f"{len(self.executed)} queries executed successfully."
        return "Query executed successfully."


class BatchExecutor:
    """Splits a SQL blob and runs its statements one after another."""

    def __init__(self, datasource: DataSource):
        self.datasource = datasource

    def execute(self, blob: str) -> BatchResult:
        """Run every statement of a batch in order, stopping at the first failure.

        Statements that completed before a failure keep their effects; no
        transaction spans the batch.

        Args:
            blob: Raw SQL text holding one or more statements

        Returns:
            BatchResult describing what ran

        Raises:
            NoStatementsError: If the blob holds no statements
        """
        statements = split_statements(blob)
        if not statements:
            raise NoStatementsError()

        batch_logger = get_contextual_logger(
            __name__, {"batch_id": uuid.uuid4().hex[:8]}
        )
        batch_logger.info(f"Executing batch of {len(statements)} statement(s)")

        result = BatchResult(statements=statements)
        for index, statement in enumerate(statements):
            try:
                outcome = self._run_statement(statement)
            except ExecutionError as exc:
                result.failure = StatementFailure(
                    index=index, statement=statement, message=exc.message
                )
                batch_logger.warning(
                    f"Statement {index + 1}/{len(statements)} failed: {exc.message}"
                )
                break
            result.record(outcome)
            batch_logger.debug(f"Statement {index + 1}/{len(statements)} completed")

        return result

    def _run_statement(self, statement: str) -> StatementResult:
        kind = classify_statement(statement)
        if kind == StatementKind.MUTATING:
            count = self.datasource.run_mutation(statement)
            return StatementResult(statement=statement, kind=kind, affected_rows=count)
        table = self.datasource.run_query(statement)
        return StatementResult(
            statement=statement, kind=kind, result_set=project_table(table)
        )
