# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and shared fixtures for BatchAlchemy tests.
"""

from __future__ import annotations

import sqlite3
from typing import Generator
from unittest.mock import Mock

import pytest

from batchalchemy import DBAPIExecutor, SqlExecutor


@pytest.fixture(autouse=True)
def global_registry_cleanup(monkeypatch):
    """
    Clear cached metadata and settings around every test.

    Descriptors are re-resolved from the decorated classes on next use, so
    module-level models stay usable.
    """
    from batchalchemy import clear_registry, reset_settings

    for name in (
        "BATCHALCHEMY_BATCH_SIZE",
        "BATCHALCHEMY_REWRITE_BATCH_INSERTS",
        "BATCHALCHEMY_REWRITTEN_INSERT_SIZE",
        "BATCHALCHEMY_FAN_OUT_BELOW_VERSION",
    ):
        monkeypatch.delenv(name, raising=False)

    clear_registry()
    reset_settings()

    yield

    clear_registry()
    reset_settings()


@pytest.fixture(scope="function")
def sqlite_connection() -> Generator[sqlite3.Connection, None, None]:
    """In-memory SQLite connection with the tables used by session tests."""
    conn = sqlite3.connect(":memory:")
    try:
        conn.execute(
            "CREATE TABLE person (id INTEGER PRIMARY KEY, first_name TEXT, surname TEXT, age INTEGER)"
        )
        conn.execute(
            "CREATE TABLE membership (club_id INTEGER, person_id INTEGER, role TEXT, "
            "PRIMARY KEY (club_id, person_id))"
        )
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def sqlite_executor(sqlite_connection: sqlite3.Connection) -> DBAPIExecutor:
    return DBAPIExecutor(sqlite_connection, paramstyle="qmark")


@pytest.fixture(scope="function")
def mock_executor() -> Mock:
    """Executor double recording every call."""
    executor = Mock(spec=SqlExecutor)
    executor.execute.return_value = 1
    executor.execute_batch.return_value = 1
    executor.fetch_all.return_value = []
    return executor
