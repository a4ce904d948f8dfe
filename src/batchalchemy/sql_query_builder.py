# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
SQL statement builder.

Pure functions turning resolved metadata plus live record values into
parameterized SQL text. Placeholders are numbered ``?1..?N`` in the order they
appear in the text, so :func:`clear_position_placeholder_indexes` can turn any
statement into its anonymous ``?`` form without reordering its bindings.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import ErrorMessages, SQLConstants
from .exceptions import ArgumentError, MetadataResolutionError
from .sql_dialects import GENERIC, ORACLE, Dialect
from .sql_orm import (
    ColumnDescriptor,
    EntityMetadata,
    get_key_fields,
    require_sequence_name,
    resolve,
)

logger = logging.getLogger(__name__)

_INDEXED_PLACEHOLDER = re.compile(SQLConstants.INDEXED_PLACEHOLDER_PATTERN)


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------

@dataclass
class QueryData:
    """
    One statement and its positional bindings.

    :ivar query: SQL text with ``?N`` (or anonymous ``?``) placeholders
    :ivar position_bindings: Placeholder index to value, in encounter order
    :ivar named_bindings: Name to value, for named parameter styles
    """
    query: str
    position_bindings: Dict[int, Any] = field(default_factory=dict)
    named_bindings: Optional[Dict[str, Any]] = None

    @property
    def anonymous_query(self) -> str:
        return clear_position_placeholder_indexes(self.query)

    @property
    def parameters(self) -> Tuple[Any, ...]:
        """Binding values ordered by placeholder index."""
        return tuple(self.position_bindings[index] for index in sorted(self.position_bindings))

    def with_named_bindings(self, prefix: str = "p") -> "QueryData":
        """Return a copy using ``:p1`` style placeholders and ``named_bindings``."""
        query = _INDEXED_PLACEHOLDER.sub(lambda match: f":{prefix}{match.group(1)}", self.query)
        named = {f"{prefix}{index}": value for index, value in self.position_bindings.items()}
        return QueryData(query=query, position_bindings=dict(self.position_bindings), named_bindings=named)


@dataclass
class BatchData:
    """
    One shared statement template and one binding set per executed row.

    :ivar query: Template, usually in anonymous ``?`` form
    :ivar queries_bindings: Binding sets, one per row or per multi-row group
    """
    query: str
    queries_bindings: List[Dict[int, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.queries_bindings)


class BindingCounter:
    """
    Placeholder numbering state for one statement build.

    A fresh counter is created per build and threaded through the fragment
    builders; it is never shared between builds.
    """

    def __init__(self, start: int = 1):
        self._next = start

    def take(self) -> int:
        index = self._next
        self._next += 1
        return index

    @property
    def issued(self) -> int:
        return self._next - 1


def clear_position_placeholder_indexes(query: str) -> str:
    """Replace every ``?N`` placeholder with a bare ``?``."""
    return _INDEXED_PLACEHOLDER.sub(SQLConstants.PLACEHOLDER, query)


# -----------------------------------------------------------------------------
# Fragment helpers
# -----------------------------------------------------------------------------

def _bind(value: Any, counter: BindingCounter, bindings: Dict[int, Any]) -> str:
    index = counter.take()
    bindings[index] = value
    return f"{SQLConstants.PLACEHOLDER}{index}"


def _column_list(columns: Iterable[ColumnDescriptor]) -> str:
    return "(" + SQLConstants.COLUMN_SEPARATOR.join(column.column_name for column in columns) + ")"


def _values_tuple(
    record: Any,
    columns: Sequence[ColumnDescriptor],
    counter: BindingCounter,
    bindings: Dict[int, Any],
    tokens: Optional[Dict[str, str]] = None,
) -> str:
    parts: List[str] = []
    for column in columns:
        if tokens and column.column_name in tokens:
            parts.append(tokens[column.column_name])
        else:
            parts.append(_bind(column.getter(record), counter, bindings))
    return "(" + SQLConstants.COLUMN_SEPARATOR.join(parts) + ")"


def _predicates(
    values: Sequence[Tuple[str, Any]],
    counter: BindingCounter,
    bindings: Dict[int, Any],
    alias: Optional[str] = None,
) -> str:
    prefix = f"{alias}." if alias else ""
    joiner = f" {SQLConstants.AND} "
    return joiner.join(
        f"{prefix}{column_name}{SQLConstants.EQUALS}{_bind(value, counter, bindings)}"
        for column_name, value in values
    )


def _require_records(records: Iterable[Any], operation: str) -> Tuple[List[Any], EntityMetadata]:
    records = list(records)
    if not records:
        raise ArgumentError(ErrorMessages.EMPTY_RECORDS.format(operation=operation))
    first_type = type(records[0])
    for record in records[1:]:
        if type(record) is not first_type:
            raise ArgumentError(
                ErrorMessages.MIXED_RECORD_TYPES.format(first=first_type.__name__, other=type(record).__name__)
            )
    return records, resolve(first_type)


def _sequence_for(metadata: EntityMetadata, id_field: str, sequence_name: Optional[str]) -> str:
    if sequence_name:
        return sequence_name
    return require_sequence_name(metadata.model, id_field)


# -----------------------------------------------------------------------------
# Inserts
# -----------------------------------------------------------------------------

def build_insert(record: Any) -> QueryData:
    """Build ``INSERT INTO t (c1, c2) VALUES (?1, ?2)`` for one record."""
    return build_multi_insert([record])


def build_multi_insert(records: Iterable[Any]) -> QueryData:
    """
    Build one INSERT with a VALUES tuple per record.

    Numbering continues across rows: row 1 uses ``?1..?k``, row 2 ``?(k+1)..?2k``.

    :param records: Records of one type, in insertion order
    :raises ArgumentError: If ``records`` is empty or mixes types
    """
    records, metadata = _require_records(records, "build_multi_insert")
    table = metadata.require_table_name()

    counter = BindingCounter()
    bindings: Dict[int, Any] = {}
    rows = [_values_tuple(record, metadata.columns, counter, bindings) for record in records]

    query = (
        f"{SQLConstants.INSERT_INTO} {table} {_column_list(metadata.columns)} "
        f"{SQLConstants.VALUES} {SQLConstants.COLUMN_SEPARATOR.join(rows)}"
    )
    return QueryData(query=query, position_bindings=bindings)


def build_insert_with_sequence_id(
    records: Iterable[Any],
    id_field: str,
    sequence_name: Optional[str] = None,
    dialect: Dialect = GENERIC,
) -> QueryData:
    """
    Multi-row insert whose id column takes the next sequence value.

    The id column keeps its usual position; its placeholder is replaced by the
    dialect's next-value token and binds nothing.

    :param id_field: Field (or dotted path) of the id column
    :param sequence_name: Sequence to draw from; resolved from metadata when omitted
    """
    records, metadata = _require_records(records, "build_insert_with_sequence_id")
    table = metadata.require_table_name()
    id_column = metadata.column_for(id_field)
    tokens = {id_column.column_name: dialect.nextval(_sequence_for(metadata, id_field, sequence_name))}

    counter = BindingCounter()
    bindings: Dict[int, Any] = {}
    rows = [_values_tuple(record, metadata.columns, counter, bindings, tokens) for record in records]

    query = (
        f"{SQLConstants.INSERT_INTO} {table} {_column_list(metadata.columns)} "
        f"{SQLConstants.VALUES} {SQLConstants.COLUMN_SEPARATOR.join(rows)}"
    )
    return QueryData(query=query, position_bindings=bindings)


def build_dialect_insert_all(records: Iterable[Any], *extra_groups: Iterable[Any]) -> QueryData:
    """
    Build a single-statement fan-out insert across one or more record groups.

    Groups may hold different record types; each record contributes one
    ``INTO <table> (...) VALUES (...)`` clause.

    :raises ArgumentError: If no group holds a record
    """
    counter = BindingCounter()
    bindings: Dict[int, Any] = {}
    clauses: List[str] = []

    for group in (records, *extra_groups):
        for record in group:
            metadata = resolve(record)
            clauses.append(
                f"{SQLConstants.INTO} {metadata.require_table_name()} {_column_list(metadata.columns)} "
                f"{SQLConstants.VALUES} {_values_tuple(record, metadata.columns, counter, bindings)}\n"
            )

    if not clauses:
        raise ArgumentError(ErrorMessages.NO_RECORDS_FOR_FAN_OUT)

    query = f"{SQLConstants.INSERT_ALL} \n" + "".join(clauses) + SQLConstants.FAN_OUT_TERMINATOR
    return QueryData(query=query, position_bindings=bindings)


def columns_with_id_first(model: Any, id_field: str) -> List[ColumnDescriptor]:
    """
    Standard column order with the id column moved to the front.

    The remaining columns keep the order every other builder uses.
    """
    metadata = resolve(model)
    id_column = metadata.column_for(id_field)
    return [id_column] + [column for column in metadata.columns if column is not id_column]


def build_sequence_derived_insert(
    records: Iterable[Any],
    id_field: str,
    sequence_name: Optional[str] = None,
    dialect: Dialect = ORACLE,
) -> QueryData:
    """
    Insert through a derived table so each row draws its own sequence value.

    Produces ``INSERT INTO t (id, c1) SELECT seq.nextval, mt.* FROM (SELECT (?1)
    as c1 FROM DUAL UNION ALL SELECT (?2) as c1 FROM DUAL) mt``.
    """
    records, metadata = _require_records(records, "build_sequence_derived_insert")
    table = metadata.require_table_name()
    nextval = dialect.nextval(_sequence_for(metadata, id_field, sequence_name))
    ordered = columns_with_id_first(metadata.model, id_field)
    value_columns = ordered[1:]

    counter = BindingCounter()
    bindings: Dict[int, Any] = {}
    selects: List[str] = []
    for record in records:
        projections = SQLConstants.COLUMN_SEPARATOR.join(
            f"({_bind(column.getter(record), counter, bindings)}) {SQLConstants.AS} {column.column_name}"
            for column in value_columns
        )
        selects.append(f"{SQLConstants.SELECT} {projections} {SQLConstants.FROM_DUAL}")

    alias = SQLConstants.DERIVED_TABLE_ALIAS
    union = f" {SQLConstants.UNION_ALL} ".join(selects)
    query = (
        f"{SQLConstants.INSERT_INTO} {table} {_column_list(ordered)} "
        f"{SQLConstants.SELECT} {nextval}, {alias}.* {SQLConstants.FROM} "
        f"({union}) {alias}"
    )
    return QueryData(query=query, position_bindings=bindings)


# -----------------------------------------------------------------------------
# Updates and deletes
# -----------------------------------------------------------------------------

def _update_columns(metadata: EntityMetadata, fields: Optional[Iterable[str]]) -> List[ColumnDescriptor]:
    model_name = metadata.model.__name__
    if fields is None:
        columns = list(metadata.non_key_columns)
        if not columns:
            raise ArgumentError(ErrorMessages.NO_UPDATABLE_COLUMNS.format(model_name=model_name))
        return columns

    requested = list(fields)
    if not requested:
        raise ArgumentError(ErrorMessages.EMPTY_UPDATE_FIELDS.format(model_name=model_name))
    try:
        chosen = {metadata.column_for(name).path for name in requested}
    except MetadataResolutionError as exc:
        raise ArgumentError(str(exc)) from exc

    # Column order, not request order
    columns = [column for column in metadata.non_key_columns if column.path in chosen]
    if not columns:
        raise ArgumentError(
            ErrorMessages.KEY_ONLY_UPDATE_FIELDS.format(model_name=model_name, fields=requested)
        )
    return columns


def build_update(record: Any, fields: Optional[Iterable[str]] = None, dialect: Dialect = GENERIC) -> QueryData:
    """
    Build an UPDATE over all non-key columns or an explicit subset.

    SET placeholders come first, then the key predicates of the WHERE clause.

    :param record: Record carrying the new values and its key
    :param fields: Field names to update; key fields in the subset are ignored
    :param dialect: Controls whether the SET list is parenthesized
    :raises ArgumentError: If the subset is empty, unknown, or holds only key fields
    """
    metadata = resolve(record)
    table = metadata.require_table_name()
    columns = _update_columns(metadata, fields)

    counter = BindingCounter()
    bindings: Dict[int, Any] = {}
    assignments = SQLConstants.COLUMN_SEPARATOR.join(
        f"{column.column_name}{SQLConstants.EQUALS}{_bind(column.getter(record), counter, bindings)}"
        for column in columns
    )
    if dialect.parenthesize_update_set:
        assignments = f"({assignments})"

    where = _predicates(
        [(column.column_name, column.getter(record)) for column in metadata.key_columns], counter, bindings
    )
    query = f"{SQLConstants.UPDATE} {table} {SQLConstants.SET} {assignments} {SQLConstants.WHERE} {where}"
    return QueryData(query=query, position_bindings=bindings)


def build_delete(key_value: Any, model: Any) -> QueryData:
    """
    Build a DELETE for one key value.

    :param key_value: Scalar key, key holder, mapping, tuple, or a record
    :param model: Record type the key belongs to
    """
    metadata = resolve(model)
    table = metadata.require_table_name()

    counter = BindingCounter()
    bindings: Dict[int, Any] = {}
    where = _predicates(
        [(bound.column_name, bound.value) for bound in get_key_fields(key_value, metadata.model)],
        counter,
        bindings,
    )
    return QueryData(query=f"{SQLConstants.DELETE_FROM} {table} {SQLConstants.WHERE} {where}", position_bindings=bindings)


def build_where_clause_for_keys(
    key_values: Iterable[Any],
    model: Any,
    alias: Optional[str] = None,
) -> QueryData:
    """
    Build ``(k1 = ?1 AND k2 = ?2) OR (k1 = ?3 AND k2 = ?4)`` for a list of keys.

    :param alias: Table alias prefixed to every column, e.g. ``t`` -> ``t.id``
    :returns: The predicate text only, numbered from ``?1``
    """
    metadata = resolve(model)
    key_values = list(key_values)
    if not key_values:
        raise ArgumentError(ErrorMessages.EMPTY_RECORDS.format(operation="build_where_clause_for_keys"))

    counter = BindingCounter()
    bindings: Dict[int, Any] = {}
    groups = [
        "(" + _predicates(
            [(bound.column_name, bound.value) for bound in get_key_fields(key, metadata.model)],
            counter,
            bindings,
            alias,
        ) + ")"
        for key in key_values
    ]
    return QueryData(query=f" {SQLConstants.OR} ".join(groups), position_bindings=bindings)


def build_delete_all(key_values: Iterable[Any], model: Any) -> QueryData:
    """Build ``DELETE FROM t WHERE (...) OR (...)`` for several keys."""
    metadata = resolve(model)
    table = metadata.require_table_name()
    where = build_where_clause_for_keys(key_values, metadata.model)
    return QueryData(
        query=f"{SQLConstants.DELETE_FROM} {table} {SQLConstants.WHERE} {where.query}",
        position_bindings=where.position_bindings,
    )
