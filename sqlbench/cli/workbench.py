"""Interactive CLI for batch SQL execution and table editing."""

from __future__ import annotations

import shlex
import sys
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory

from ..catalog import ColumnDescriptor, SchemaIntrospector
from ..config import Config, DataSourceConfig, load_config
from ..datasources import DataSource, create_datasource
from ..errors import SqlBenchError, ValidationError
from ..processor import BatchExecutor, BatchResult, ResultSet, hide_audit_columns
from ..repository import RowRepository
from ..utils.logging import setup_logging

SQL_KEYWORDS = [
    "SELECT", "FROM", "WHERE", "INSERT", "INTO", "VALUES", "UPDATE", "SET",
    "DELETE", "CREATE", "TABLE", "ALTER", "DROP", "TRUNCATE", "ORDER", "BY",
]
SHORTCUTS = [".tables", ".describe", ".show", ".insert", ".update", ".delete"]


class WorkbenchRuntime:
    """Wires one data source to the batch executor and row repository."""

    def __init__(self, datasource: DataSource, hidden_columns: Sequence[str]):
        self.datasource = datasource
        self.hidden_columns = tuple(hidden_columns)
        self.executor = BatchExecutor(datasource)
        self.repository = RowRepository(datasource)
        self.introspector = SchemaIntrospector(datasource)

    def execute(self, sql: str) -> BatchResult:
        """Run a SQL batch."""
        return self.executor.execute(sql)

    def list_tables(self) -> List[str]:
        return self.introspector.list_tables()

    def describe(self, table: str) -> List[ColumnDescriptor]:
        return self.introspector.describe(table)

    def show(self, table: str) -> ResultSet:
        """Fetch a table for display, audit columns hidden."""
        snapshot = self.repository.list(table)
        columns = hide_audit_columns(snapshot.column_names(), self.hidden_columns)
        return ResultSet(columns=columns, rows=snapshot.rows)


class ResultPrinter:
    """Formats result sets for CLI display."""

    def __init__(self, emit: Callable[[str], None]):
        self.emit = emit

    def display(self, result: ResultSet, elapsed_ms: Optional[float] = None) -> None:
        if not result.rows:
            self.emit("Query successful, but no rows returned.")
            return
        rows = self._build_rows(result)
        lines = self._format_table(result.columns, rows)
        for line in lines:
            self.emit(line)
        summary = f"{result.row_count} rows"
        if elapsed_ms is not None:
            summary = f"{summary} in {elapsed_ms:.2f} ms"
        self.emit(summary)

    def display_row(self, row: Dict[str, object]) -> None:
        self.display(ResultSet(columns=list(row.keys()), rows=[row]))

    def _build_rows(self, result: ResultSet) -> List[List[str]]:
        rows: List[List[str]] = []
        for row in result.rows:
            values = []
            for col in result.columns:
                values.append(self._stringify_cell(row.get(col)))
            rows.append(values)
        return rows

    def _format_table(self, headers: List[str], rows: List[List[str]]) -> List[str]:
        widths = self._compute_widths(headers, rows)
        border = self._build_border(widths)
        lines: List[str] = []
        lines.append(border)
        lines.append(self._format_row(headers, widths))
        lines.append(border)
        for row in rows:
            lines.append(self._format_row(row, widths))
        lines.append(border)
        return lines

    def _compute_widths(self, headers: List[str], rows: List[List[str]]) -> List[int]:
        widths: List[int] = []
        for header in headers:
            widths.append(len(header))
        for row in rows:
            for index, text in enumerate(row):
                if len(text) > widths[index]:
                    widths[index] = len(text)
        return widths

    def _build_border(self, widths: List[int]) -> str:
        parts: List[str] = ["+"]
        for width in widths:
            parts.append("-" * (width + 2))
            parts.append("+")
        return "".join(parts)

    def _format_row(self, values: List[str], widths: List[int]) -> str:
        parts: List[str] = ["|"]
        for index, value in enumerate(values):
            parts.append(f" {value.ljust(widths[index])} ")
            parts.append("|")
        return "".join(parts)

    def _stringify_cell(self, value: object) -> str:
        if value is None:
            return "NULL"
        return str(value)


class SchemaPrinter:
    """Prints table lists and column descriptions."""

    def __init__(self, emit: Callable[[str], None]):
        self.emit = emit

    def display_tables(self, tables: List[str]) -> None:
        if not tables:
            self.emit("No tables found.")
            return
        for table in tables:
            self.emit(f"  {table}")

    def display_columns(self, table: str, columns: List[ColumnDescriptor]) -> None:
        self.emit(f"Table: {table}")
        for column in columns:
            nullable = "NULL" if column.nullable else "NOT NULL"
            key = " PRIMARY KEY" if column.is_primary_key else ""
            self.emit(
                f"  - {column.name}: {column.declared_type} "
                f"({column.family.value}) {nullable}{key}"
            )


def parse_assignments(tokens: Sequence[str]) -> Dict[str, str]:
    """Parse ``column=value`` tokens into a mapping."""
    values: Dict[str, str] = {}
    for token in tokens:
        if "=" not in token:
            raise ValidationError(f"Expected column=value, got {token!r}")
        column, value = token.split("=", 1)
        values[column] = value
    return values


class WorkbenchRepl:
    """Interactive loop with full terminal support."""

    def __init__(
        self,
        runtime: WorkbenchRuntime,
        printer: ResultPrinter,
        schema_printer: SchemaPrinter,
        session: Optional[PromptSession] = None,
    ):
        self.runtime = runtime
        self.printer = printer
        self.schema_printer = schema_printer
        self.completer = WordCompleter([], ignore_case=True)
        self.refresh_tables()
        self.session = session

    def refresh_tables(self) -> List[str]:
        """Reload the table list used for completion."""
        tables = self.runtime.list_tables()
        self.completer.words = SQL_KEYWORDS + SHORTCUTS + tables
        return tables

    def _create_session(self) -> PromptSession:
        """Create prompt session backed by persistent history."""
        history_file = self._history_path()
        history = FileHistory(str(history_file))
        auto_suggest = AutoSuggestFromHistory()
        return PromptSession(
            history=history, auto_suggest=auto_suggest, completer=self.completer
        )

    def _history_path(self) -> Path:
        """Return history file path, creating the file when necessary."""
        history_path = Path(".sqlbench_history")
        if not history_path.exists():
            history_path.touch()
        return history_path

    def run(self) -> None:
        if self.session is None:
            self.session = self._create_session()
        buffer: List[str] = []
        while True:
            line, should_continue = self._read_line(buffer)
            if not should_continue:
                break
            if line is None:
                continue
            if not buffer and self._is_exit_command(line):
                break
            if not buffer and self._is_shortcut_command(line):
                self.execute_shortcut(line)
                continue
            buffer.append(line)
            if self._is_complete_statement(line):
                batch = "\n".join(buffer)
                buffer.clear()
                self.execute_batch(batch)

    def _read_line(self, buffer: List[str]) -> Tuple[Optional[str], bool]:
        prompt = self._get_prompt(buffer)
        try:
            line = self.session.prompt(prompt)
            return line, True
        except EOFError:
            click.echo("")
            return None, False
        except KeyboardInterrupt:
            click.echo("")
            buffer.clear()
            return None, True

    def _get_prompt(self, buffer: List[str]) -> str:
        if buffer:
            return "...> "
        return "sqlbench> "

    def _is_exit_command(self, line: str) -> bool:
        return line.strip().lower() in ("\\q", "quit", "exit")

    def _is_shortcut_command(self, line: str) -> bool:
        return line.strip().startswith(".")

    def _is_complete_statement(self, line: str) -> bool:
        return line.strip().endswith(";")

    def execute_batch(self, batch: str) -> bool:
        """Run a batch and print its outcome. Returns True on success."""
        try:
            start = time.time()
            result = self.runtime.execute(batch)
            elapsed = (time.time() - start) * 1000
        except SqlBenchError as exc:
            click.echo(f"error: {exc}")
            return False

        if result.schema_may_have_changed:
            self.refresh_tables()
        if not result.succeeded:
            click.echo(f"error: {result.message}")
            return False
        if result.result_set is not None:
            self.printer.display(result.result_set, elapsed)
            return True
        click.echo(result.message)
        click.echo(f"Rows affected: {result.total_affected_rows}")
        if result.schema_may_have_changed:
            click.echo("Table list refreshed.")
        return True

    def execute_shortcut(self, line: str) -> bool:
        """Run a dot command. Returns True on success."""
        try:
            tokens = shlex.split(line.strip())
        except ValueError as exc:
            click.echo(f"error: {exc}")
            return False
        command = tokens[0].lower()
        args = tokens[1:]
        try:
            return self._dispatch_shortcut(command, args)
        except SqlBenchError as exc:
            click.echo(f"error: {exc}")
        except Exception as exc:
            click.echo(f"unexpected error: {exc}")
        return False

    def _dispatch_shortcut(self, command: str, args: List[str]) -> bool:
        if command == ".tables":
            self.schema_printer.display_tables(self.refresh_tables())
            return True
        if command == ".describe" and len(args) == 1:
            self.schema_printer.display_columns(args[0], self.runtime.describe(args[0]))
            return True
        if command == ".show" and len(args) == 1:
            self.printer.display(self.runtime.show(args[0]))
            return True
        if command == ".insert" and args:
            row = self.runtime.repository.insert(args[0], parse_assignments(args[1:]))
            self.printer.display_row(row)
            return True
        if command == ".update" and len(args) == 3:
            assignment = parse_assignments(args[2:])
            column, value = next(iter(assignment.items()))
            row = self.runtime.repository.update_field(args[0], args[1], column, value)
            self.printer.display_row(row)
            return True
        if command == ".delete" and len(args) == 2:
            self.runtime.repository.delete(args[0], args[1])
            click.echo(f"Row {args[1]} deleted successfully.")
            return True
        click.echo(f"Unknown or malformed shortcut: {command}")
        click.echo(
            "Available shortcuts: .tables, .describe <table>, .show <table>, "
            ".insert <table> col=value ..., .update <table> <id> col=value, "
            ".delete <table> <id>"
        )
        return False


def _load_config_bundle(config_path: Optional[str]) -> Tuple[Config, Optional[str]]:
    if config_path:
        return load_config(config_path), None
    config = _build_default_config()
    note = "Using in-memory SQLite data source with a demo products table."
    return config, note


def _build_default_config() -> Config:
    config = Config()
    ds_config = DataSourceConfig(
        name="sqlite_mem",
        type="sqlite",
        config={"path": ":memory:"},
    )
    config.datasources[ds_config.name] = ds_config
    return config


def _prepare_runtime(config: Config, seed_demo: bool) -> WorkbenchRuntime:
    datasource = create_datasource(config.get_default_datasource())
    datasource.connect()
    if seed_demo:
        _seed_demo_data(datasource)
    return WorkbenchRuntime(datasource, config.editor.hidden_columns)


def _seed_demo_data(datasource: DataSource) -> None:
    datasource.run_mutation(
        """
        CREATE TABLE IF NOT EXISTS products (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            price REAL,
            in_stock BOOLEAN
        )
        """
    )
    datasource.run_mutation(
        """
        INSERT INTO products (name, price, in_stock) VALUES
        ('Keyboard', 49.5, 1),
        ('Monitor', 189.0, 1),
        ('Cable', 7.25, 0)
        """
    )


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to YAML config file. Defaults to an in-memory SQLite demo.",
)
@click.option(
    "-e",
    "--execute",
    "sql",
    help="Run one SQL batch and exit instead of starting the REPL.",
)
@click.option("--log-level", default=None, help="Override the configured log level.")
def cli(config_path: Optional[str], sql: Optional[str], log_level: Optional[str]) -> None:
    """Entry point for the sqlbench CLI."""
    config, note = _load_config_bundle(config_path)
    setup_logging(
        level=log_level or config.logging.level,
        structured=config.logging.structured,
        log_file=config.logging.file,
    )
    runtime = _prepare_runtime(config, seed_demo=note is not None)
    printer = ResultPrinter(click.echo)
    schema_printer = SchemaPrinter(click.echo)
    repl = WorkbenchRepl(runtime, printer, schema_printer)

    try:
        if sql is not None:
            if not repl.execute_batch(sql):
                sys.exit(1)
            return
        if note:
            click.echo(note)
        click.echo("Type SQL statements terminated by ';'. Use \\q to exit.")
        click.echo("Use .tables to list tables and .show <table> to browse one.")
        repl.run()
    finally:
        runtime.datasource.disconnect()


if __name__ == "__main__":
    cli()
