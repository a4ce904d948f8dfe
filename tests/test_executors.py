# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Tests for placeholder rendering and the DB-API executor.
"""

from __future__ import annotations

import sqlite3
from unittest.mock import MagicMock

import pytest

from batchalchemy import ArgumentError, DBAPIExecutor, ParamStyle, build_delete_all, build_multi_insert
from batchalchemy.sql_executors import order_parameters, render_placeholders

from .sample_models import Person, make_people


class TestRenderPlaceholders:

    @pytest.mark.parametrize(
        "paramstyle, expected",
        [
            (ParamStyle.QMARK, "SELECT ? + ? WHERE x = ?"),
            (ParamStyle.NUMERIC, "SELECT :1 + :2 WHERE x = :3"),
            (ParamStyle.NAMED, "SELECT :p1 + :p2 WHERE x = :p3"),
            (ParamStyle.FORMAT, "SELECT %s + %s WHERE x = %s"),
        ],
    )
    def test_styles(self, paramstyle, expected):
        assert render_placeholders("SELECT ?1 + ?2 WHERE x = ?3", paramstyle) == expected

    def test_anonymous_placeholders(self):
        assert render_placeholders("VALUES (?, ?)", ParamStyle.NUMERIC) == "VALUES (:1, :2)"

    def test_format_escapes_percent(self):
        assert render_placeholders("WHERE a LIKE 'x%' AND b = ?1", ParamStyle.FORMAT) == (
            "WHERE a LIKE 'x%%' AND b = %s"
        )


class TestOrderParameters:

    def test_positional(self):
        assert order_parameters({2: "b", 1: "a", 3: None}, ParamStyle.QMARK) == ("a", "b", None)

    def test_named(self):
        assert order_parameters({1: "a", 2: "b"}, ParamStyle.NAMED) == {"p1": "a", "p2": "b"}


class TestDBAPIExecutor:

    def test_unsupported_paramstyle(self):
        with pytest.raises(ArgumentError):
            DBAPIExecutor(MagicMock(), paramstyle="pyformat")

    def test_cursor_closed_on_error(self):
        connection = MagicMock()
        cursor = connection.cursor.return_value
        cursor.execute.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            DBAPIExecutor(connection).execute("SELECT ?1", {1: 1})
        cursor.close.assert_called_once()
        connection.commit.assert_not_called()

    def test_execute_batch_orders_each_binding_set(self):
        connection = MagicMock()
        cursor = connection.cursor.return_value
        cursor.rowcount = 2

        count = DBAPIExecutor(connection, ParamStyle.FORMAT).execute_batch(
            "INSERT INTO t (a, b) VALUES (?, ?)", [{1: "x", 2: 1}, {2: 2, 1: "y"}]
        )

        assert count == 2
        cursor.executemany.assert_called_once_with(
            "INSERT INTO t (a, b) VALUES (%s, %s)", [("x", 1), ("y", 2)]
        )

    def test_fetch_all_returns_tuples(self, sqlite_executor):
        assert sqlite_executor.fetch_all("SELECT ?1, ?2", {1: 3, 2: "x"}) == [(3, "x")]

    @pytest.mark.parametrize("paramstyle", ["qmark", "named"])
    def test_sqlite_paramstyles(self, sqlite_connection: sqlite3.Connection, paramstyle: str):
        executor = DBAPIExecutor(sqlite_connection, paramstyle)
        insert = build_multi_insert(make_people(3))
        assert executor.execute(insert.query, insert.position_bindings) == 3

        delete = build_delete_all([1, 3], Person)
        assert executor.execute(delete.query, delete.position_bindings) == 2
        assert executor.fetch_all("SELECT id FROM person", {}) == [(2,)]
