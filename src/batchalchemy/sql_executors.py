# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Executor interface and a PEP 249 (DB-API) adapter.

Statements arrive with ``?N`` or anonymous ``?`` placeholders and bindings keyed
by placeholder index. The adapter rewrites the placeholders into the driver's
parameter style and orders the values by index. Driver errors propagate
unchanged; transactions belong to whoever owns the connection.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from .constants import ErrorMessages, LoggingConstants, ParamStyle
from .exceptions import ArgumentError

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\?(\d*)")

Bindings = Mapping[int, Any]


class SqlExecutor(ABC):
    """
    Runs built statements against a database.

    Implementations own no planning logic; they receive finished SQL text and
    bindings keyed by placeholder index.
    """

    @abstractmethod
    def execute(self, query: str, bindings: Bindings) -> int:
        """
        Execute one statement.

        Args:
            query: SQL text with ``?N`` or ``?`` placeholders
            bindings: Placeholder index to value

        Returns:
            Affected row count as reported by the driver
        """

    @abstractmethod
    def execute_batch(self, query: str, bindings_list: Sequence[Bindings]) -> int:
        """Execute one template once per binding set."""

    @abstractmethod
    def fetch_all(self, query: str, bindings: Bindings) -> List[Tuple[Any, ...]]:
        """Execute a query and return every result row."""


def render_placeholders(query: str, paramstyle: ParamStyle) -> str:
    """Rewrite ``?N``/``?`` placeholders into ``paramstyle``, numbering in text order."""
    if paramstyle is ParamStyle.FORMAT:
        query = query.replace("%", "%%")

    position = 0

    def replace(match: "re.Match[str]") -> str:
        nonlocal position
        position += 1
        if paramstyle is ParamStyle.QMARK:
            return "?"
        if paramstyle is ParamStyle.NUMERIC:
            return f":{position}"
        if paramstyle is ParamStyle.NAMED:
            return f":p{position}"
        return "%s"

    return _PLACEHOLDER.sub(replace, query)


def order_parameters(bindings: Bindings, paramstyle: ParamStyle) -> Union[Tuple[Any, ...], Dict[str, Any]]:
    values = tuple(bindings[index] for index in sorted(bindings))
    if paramstyle is ParamStyle.NAMED:
        return {f"p{position}": value for position, value in enumerate(values, start=1)}
    return values


class DBAPIExecutor(SqlExecutor):
    """
    Adapter over any PEP 249 connection.

    :param connection: Open DB-API connection; never committed or closed here
    :param paramstyle: The driver's parameter style (``qmark``, ``numeric``,
        ``named`` or ``format``)
    """

    def __init__(self, connection: Any, paramstyle: Union[str, ParamStyle] = ParamStyle.QMARK):
        try:
            self.paramstyle = ParamStyle(paramstyle)
        except ValueError as exc:
            raise ArgumentError(ErrorMessages.UNSUPPORTED_PARAMSTYLE.format(paramstyle=paramstyle)) from exc
        self.connection = connection

    def execute(self, query: str, bindings: Bindings) -> int:
        sql = render_placeholders(query, self.paramstyle)
        logger.debug(LoggingConstants.EXECUTING_QUERY.format(query=sql))
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, order_parameters(bindings, self.paramstyle))
            return cursor.rowcount
        finally:
            cursor.close()

    def execute_batch(self, query: str, bindings_list: Sequence[Bindings]) -> int:
        sql = render_placeholders(query, self.paramstyle)
        logger.debug(LoggingConstants.EXECUTING_BATCH.format(rows=len(bindings_list), query=sql))
        cursor = self.connection.cursor()
        try:
            cursor.executemany(sql, [order_parameters(bindings, self.paramstyle) for bindings in bindings_list])
            return cursor.rowcount
        finally:
            cursor.close()

    def fetch_all(self, query: str, bindings: Bindings) -> List[Tuple[Any, ...]]:
        sql = render_placeholders(query, self.paramstyle)
        logger.debug(LoggingConstants.EXECUTING_QUERY.format(query=sql))
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, order_parameters(bindings, self.paramstyle))
            return [tuple(row) for row in cursor.fetchall()]
        finally:
            cursor.close()
