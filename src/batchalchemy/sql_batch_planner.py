# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Batch planning for bulk writes.

Records are sliced into fixed-size batches in input order. Each batch becomes a
:class:`BatchData`: one anonymous-placeholder template and one binding set per
executed row. With rewrite enabled, consecutive groups of records are first merged
into multi-row statements and each group's bindings become one row of the batch.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from .config import BatchSettings, get_settings
from .constants import BatchConstants, ErrorMessages, InsertStrategy, LoggingConstants
from .exceptions import ArgumentError
from .sql_dialects import GENERIC, Dialect
from .sql_query_builder import (
    BatchData,
    QueryData,
    build_delete,
    build_dialect_insert_all,
    build_insert,
    build_insert_with_sequence_id,
    build_multi_insert,
    build_sequence_derived_insert,
    build_update,
)

logger = logging.getLogger(__name__)


def _check_size(name: str, value: int) -> int:
    if value is None or value < 1:
        raise ArgumentError(ErrorMessages.INVALID_BATCH_SIZE.format(name=name, value=value))
    return value


def _slices(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _check_single_type(records: Sequence[Any]) -> None:
    first_type = type(records[0])
    for record in records[1:]:
        if type(record) is not first_type:
            raise ArgumentError(
                ErrorMessages.MIXED_RECORD_TYPES.format(first=first_type.__name__, other=type(record).__name__)
            )


def _plan_rows(
    items: Sequence[Any],
    batch_size: int,
    build: Callable[[Any], QueryData],
    model_name: str,
) -> List[BatchData]:
    """One statement per item, one shared anonymous template per batch."""
    batches: List[BatchData] = []
    offset = 0
    for chunk in _slices(items, batch_size):
        template: Optional[str] = None
        bindings: List[Dict[int, Any]] = []
        for position, item in enumerate(chunk):
            statement = build(item)
            anonymous = statement.anonymous_query
            if template is None:
                template = anonymous
            elif anonymous != template:
                raise ArgumentError(
                    ErrorMessages.TEMPLATE_MISMATCH.format(index=offset + position, model_name=model_name)
                )
            bindings.append(statement.position_bindings)
        batches.append(BatchData(query=template, queries_bindings=bindings))
        offset += len(chunk)

    logger.debug(
        LoggingConstants.BATCH_PLANNED.format(batches=len(batches), records=len(items), model_name=model_name)
    )
    return batches


def plan_batch_inserts(records: Iterable[Any], batch_size: int) -> List[BatchData]:
    """
    Plan single-row inserts executed in batches of ``batch_size``.

    :raises ArgumentError: If ``batch_size < 1`` or the records mix types
    """
    _check_size("batch_size", batch_size)
    records = list(records)
    if not records:
        return []
    _check_single_type(records)
    return _plan_rows(records, batch_size, build_insert, type(records[0]).__name__)


def plan_batch_inserts_with_sequence(
    records: Iterable[Any],
    id_field: str,
    batch_size: int,
    sequence_name: Optional[str] = None,
    dialect: Dialect = GENERIC,
) -> List[BatchData]:
    """Plan single-row inserts whose id column draws from a sequence."""
    _check_size("batch_size", batch_size)
    records = list(records)
    if not records:
        return []
    _check_single_type(records)
    return _plan_rows(
        records,
        batch_size,
        lambda record: build_insert_with_sequence_id([record], id_field, sequence_name, dialect),
        type(records[0]).__name__,
    )


def plan_batch_updates(
    records: Iterable[Any],
    batch_size: int,
    fields: Optional[Iterable[str]] = None,
    dialect: Dialect = GENERIC,
) -> List[BatchData]:
    """Plan updates, all records updating the same column set."""
    _check_size("batch_size", batch_size)
    records = list(records)
    if not records:
        return []
    _check_single_type(records)
    fields = None if fields is None else list(fields)
    return _plan_rows(
        records,
        batch_size,
        lambda record: build_update(record, fields, dialect),
        type(records[0]).__name__,
    )


def plan_batch_deletes(key_values: Iterable[Any], model: type, batch_size: int) -> List[BatchData]:
    """Plan one DELETE per key value, executed in batches."""
    _check_size("batch_size", batch_size)
    key_values = list(key_values)
    if not key_values:
        return []
    return _plan_rows(key_values, batch_size, lambda key: build_delete(key, model), model.__name__)


def _group_statement(
    group: Sequence[Any],
    dialect: Dialect,
    id_field: Optional[str],
    sequence_name: Optional[str],
) -> QueryData:
    strategy = dialect.insert_strategy
    if id_field is None:
        if strategy is InsertStrategy.FAN_OUT:
            return build_dialect_insert_all(group)
        return build_multi_insert(group)

    if strategy is InsertStrategy.MULTI_ROW:
        return build_insert_with_sequence_id(group, id_field, sequence_name, dialect)
    # Fan-out statements cannot draw one sequence value per row; use a derived table
    return build_sequence_derived_insert(group, id_field, sequence_name, dialect)


def plan_rewritten_batch_inserts(
    records: Iterable[Any],
    batch_size: int,
    group_size: int,
    dialect: Dialect = GENERIC,
    id_field: Optional[str] = None,
    sequence_name: Optional[str] = None,
) -> List[BatchData]:
    """
    Plan inserts rewritten into multi-row statements.

    Each batch of ``batch_size`` records is cut into consecutive groups of
    ``group_size``; each group becomes one statement in the dialect's insert shape
    and contributes one binding set. Groups of equal size share one template; a
    short trailing group gets its own :class:`BatchData` so placeholder counts
    always match the template they are executed with.

    :param id_field: When set, the id column draws from ``sequence_name``
    """
    _check_size("batch_size", batch_size)
    _check_size("group_size", group_size)
    records = list(records)
    if not records:
        return []
    _check_single_type(records)

    batches: List[BatchData] = []
    for chunk in _slices(records, batch_size):
        current: Optional[BatchData] = None
        current_size = 0
        for group in _slices(chunk, group_size):
            statement = _group_statement(group, dialect, id_field, sequence_name)
            if current is None or len(group) != current_size:
                current = BatchData(query=statement.anonymous_query)
                current_size = len(group)
                batches.append(current)
            current.queries_bindings.append(statement.position_bindings)

    logger.debug(
        LoggingConstants.BATCH_PLANNED.format(
            batches=len(batches), records=len(records), model_name=type(records[0]).__name__
        )
    )
    return batches


def plan(
    records: Iterable[Any],
    batch_size: int = BatchConstants.DEFAULT_BATCH_SIZE,
    rewrite: bool = BatchConstants.DEFAULT_REWRITE_BATCH_INSERTS,
    rewrite_group_size: Optional[int] = None,
    dialect: Dialect = GENERIC,
) -> List[BatchData]:
    """
    Plan batched inserts, optionally rewritten into multi-row statements.

    An empty input yields an empty plan; fewer records than ``batch_size`` yield
    exactly one short batch.
    """
    if rewrite:
        group_size = (
            rewrite_group_size if rewrite_group_size is not None else BatchConstants.DEFAULT_REWRITTEN_INSERT_SIZE
        )
        return plan_rewritten_batch_inserts(records, batch_size, group_size, dialect)
    return plan_batch_inserts(records, batch_size)


class BatchPlanner:
    """
    Batch planning bound to settings and a dialect.

    Keyword arguments on each call override the configured defaults.
    """

    def __init__(self, settings: Optional[BatchSettings] = None, dialect: Dialect = GENERIC):
        self.settings = settings if settings is not None else get_settings()
        self.dialect = dialect

    def plan(
        self,
        records: Iterable[Any],
        batch_size: Optional[int] = None,
        rewrite: Optional[bool] = None,
        rewrite_group_size: Optional[int] = None,
    ) -> List[BatchData]:
        return plan(
            records,
            batch_size=batch_size if batch_size is not None else self.settings.batch_size,
            rewrite=rewrite if rewrite is not None else self.settings.rewrite_batch_inserts,
            rewrite_group_size=(
                rewrite_group_size if rewrite_group_size is not None else self.settings.rewritten_insert_size
            ),
            dialect=self.dialect,
        )

    def plan_with_sequence(
        self,
        records: Iterable[Any],
        id_field: str,
        sequence_name: Optional[str] = None,
        batch_size: Optional[int] = None,
        rewrite: Optional[bool] = None,
        rewrite_group_size: Optional[int] = None,
    ) -> List[BatchData]:
        batch_size = batch_size if batch_size is not None else self.settings.batch_size
        rewrite = rewrite if rewrite is not None else self.settings.rewrite_batch_inserts
        if rewrite:
            group_size = (
                rewrite_group_size if rewrite_group_size is not None else self.settings.rewritten_insert_size
            )
            return plan_rewritten_batch_inserts(
                records, batch_size, group_size, self.dialect, id_field=id_field, sequence_name=sequence_name
            )
        return plan_batch_inserts_with_sequence(records, id_field, batch_size, sequence_name, self.dialect)

    def plan_updates(
        self,
        records: Iterable[Any],
        fields: Optional[Iterable[str]] = None,
        batch_size: Optional[int] = None,
    ) -> List[BatchData]:
        batch_size = batch_size if batch_size is not None else self.settings.batch_size
        return plan_batch_updates(records, batch_size, fields, self.dialect)

    def plan_deletes(self, key_values: Iterable[Any], model: type, batch_size: Optional[int] = None) -> List[BatchData]:
        batch_size = batch_size if batch_size is not None else self.settings.batch_size
        return plan_batch_deletes(key_values, model, batch_size)
