"""Tests for statement classification."""

import pytest

from sqlbench.sql import (
    StatementKind,
    classify_statement,
    is_schema_change,
    leading_keyword,
)


def test_select_is_query():
    assert classify_statement("select * from x") == StatementKind.QUERY


def test_keyword_match_is_case_insensitive():
    assert classify_statement("Insert into x values (1)") == StatementKind.MUTATING


@pytest.mark.parametrize(
    "statement",
    [
        "CREATE TABLE t (id INTEGER)",
        "alter table t add column c TEXT",
        "DROP TABLE t",
        "  update t set c = 1",
        "DELETE FROM t",
        "TRUNCATE t",
    ],
)
def test_mutating_keywords(statement):
    assert classify_statement(statement) == StatementKind.MUTATING


def test_unrecognized_keywords_are_queries():
    assert classify_statement("PRAGMA table_info(t)") == StatementKind.QUERY
    assert classify_statement("WITH x AS (SELECT 1) SELECT * FROM x") == StatementKind.QUERY
    assert classify_statement("") == StatementKind.QUERY


def test_only_first_token_counts():
    """A keyword prefix of a longer word is not the keyword."""
    assert leading_keyword("CREATED_AT") == "CREATED_AT"
    assert classify_statement("CREATED_AT") == StatementKind.QUERY


def test_schema_change_detection():
    assert is_schema_change("create table t (id int)")
    assert is_schema_change("DROP VIEW v")
    assert not is_schema_change("INSERT INTO t VALUES (1)")
    assert not is_schema_change("SELECT 1")
