# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Bulk write session.

:class:`BatchSession` hands statements built by the query builder and batch
planner to a :class:`~batchalchemy.sql_executors.SqlExecutor`. It opens and
commits nothing; the executor's connection owner controls transactions. Every
bulk operation over an empty input is a no-op.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar

from .config import BatchSettings, get_settings
from .constants import ErrorMessages, InsertStrategy, LoggingConstants
from .exceptions import StateError
from .sql_batch_planner import BatchPlanner
from .sql_dialects import GENERIC, Dialect
from .sql_executors import SqlExecutor
from .sql_query_builder import (
    BatchData,
    QueryData,
    build_delete_all,
    build_dialect_insert_all,
    build_insert_with_sequence_id,
    build_multi_insert,
    build_sequence_derived_insert,
    build_update,
)
from .sql_sequence import EntriesWithSequence, SequenceAllocator

ModelType = TypeVar("ModelType")

logger = logging.getLogger(__name__)


class BatchSession:
    """
    Executes bulk inserts, updates and deletes through an executor.

    :param executor: Statement executor; required for every non-empty operation
    :param dialect: Statement shapes to emit, :data:`~batchalchemy.sql_dialects.GENERIC` by default
    :param settings: Batch defaults, the process-wide settings when omitted
    """

    def __init__(
        self,
        executor: Optional[SqlExecutor],
        dialect: Optional[Dialect] = None,
        settings: Optional[BatchSettings] = None,
    ):
        self.executor = executor
        self.dialect = dialect if dialect is not None else GENERIC
        self.settings = settings if settings is not None else get_settings()
        self.planner = BatchPlanner(self.settings, self.dialect)

    # ------------------------------------------------------------------
    # Execution helpers
    # ------------------------------------------------------------------

    def _require_executor(self, operation: str) -> SqlExecutor:
        if self.executor is None:
            raise StateError(ErrorMessages.NO_EXECUTOR.format(operation=operation))
        return self.executor

    def _execute(self, statement: QueryData, operation: str) -> int:
        return self._require_executor(operation).execute(statement.query, statement.position_bindings)

    def _execute_batches(self, batches: List[BatchData], operation: str) -> None:
        if not batches:
            return
        executor = self._require_executor(operation)
        for batch in batches:
            executor.execute_batch(batch.query, batch.queries_bindings)

    @staticmethod
    def _is_empty(groups: Sequence[Sequence[Any]], operation: str) -> bool:
        if any(len(group) for group in groups):
            return False
        logger.debug(LoggingConstants.EMPTY_INPUT.format(operation=operation))
        return True

    # ------------------------------------------------------------------
    # Inserts
    # ------------------------------------------------------------------

    def insert_all(self, records: Iterable[ModelType]) -> None:
        """Insert records with one statement in the dialect's multi-row shape."""
        records = list(records)
        if self._is_empty([records], "insert_all"):
            return
        if self.dialect.insert_strategy is InsertStrategy.FAN_OUT:
            statement = build_dialect_insert_all(records)
        else:
            statement = build_multi_insert(records)
        self._execute(statement, "insert_all")

    def insert_all_in_batch(
        self,
        records: Iterable[Any],
        *extra_groups: Iterable[Any],
        batch_size: Optional[int] = None,
        rewrite: Optional[bool] = None,
    ) -> None:
        """
        Insert one or more record collections in batches.

        Each collection is planned and executed separately, in the order given.

        Args:
            records: First collection
            *extra_groups: More collections, possibly of other record types
            batch_size: Rows per batch, the configured default when omitted
            rewrite: Merge rows into multi-row statements, the configured default when omitted
        """
        groups = [list(records)] + [list(group) for group in extra_groups]
        if self._is_empty(groups, "insert_all_in_batch"):
            return
        for group in groups:
            if group:
                self._execute_batches(
                    self.planner.plan(group, batch_size=batch_size, rewrite=rewrite), "insert_all_in_batch"
                )

    def insert_all_in_batch_with_sequence(
        self,
        groups: Iterable[EntriesWithSequence],
        batch_size: Optional[int] = None,
        rewrite: Optional[bool] = None,
    ) -> None:
        """Insert record groups in batches, each row drawing its key from the group's sequence."""
        groups = list(groups)
        if self._is_empty([group.entries for group in groups], "insert_all_in_batch_with_sequence"):
            return
        for group in groups:
            if not group.entries:
                continue
            batches = self.planner.plan_with_sequence(
                group.entries,
                group.sequence_field,
                sequence_name=group.resolve_sequence_name(),
                batch_size=batch_size,
                rewrite=rewrite,
            )
            self._execute_batches(batches, "insert_all_in_batch_with_sequence")

    def dialect_insert_all(self, *groups: Iterable[Any]) -> None:
        """Insert every record of every group with one fan-out statement."""
        groups = [list(group) for group in groups]
        if self._is_empty(groups, "dialect_insert_all"):
            return
        self._execute(build_dialect_insert_all(groups[0], *groups[1:]), "dialect_insert_all")

    def insert_all_with_sequence_id(self, groups: Iterable[EntriesWithSequence]) -> None:
        """
        Insert record groups keyed from sequences with as few statements as possible.

        A single group with an allocation size of 1 draws its keys inside the
        insert statement itself. Otherwise keys are reserved in one round trip,
        assigned to the records, and the groups are inserted afterwards.
        """
        groups = [group for group in groups if group.entries]
        if self._is_empty([group.entries for group in groups], "insert_all_with_sequence_id"):
            return
        executor = self._require_executor("insert_all_with_sequence_id")

        if len(groups) == 1 and groups[0].effective_allocation_size == 1:
            group = groups[0]
            sequence = group.resolve_sequence_name()
            if self.dialect.insert_strategy is InsertStrategy.MULTI_ROW:
                statement = build_insert_with_sequence_id(group.entries, group.sequence_field, sequence, self.dialect)
            else:
                statement = build_sequence_derived_insert(group.entries, group.sequence_field, sequence, self.dialect)
            self._execute(statement, "insert_all_with_sequence_id")
            return

        SequenceAllocator(executor, self.dialect).assign(groups)
        if self.dialect.insert_strategy is InsertStrategy.FAN_OUT:
            self.dialect_insert_all(*[group.entries for group in groups])
        else:
            for group in groups:
                self.insert_all(group.entries)

    def allocate_sequences(self, counts: Mapping[str, int]) -> Dict[str, List[int]]:
        """Reserve ``counts[name]`` values from each named sequence in one round trip."""
        if not any(counts.values()):
            return {sequence: [] for sequence in counts}
        return SequenceAllocator(self._require_executor("allocate_sequences"), self.dialect).allocate(counts)

    # ------------------------------------------------------------------
    # Updates and deletes
    # ------------------------------------------------------------------

    def update(self, record: ModelType, fields: Optional[Iterable[str]] = None) -> ModelType:
        """
        Update one record by its key.

        :param fields: Field names to write; every non-key column when omitted
        :returns: The record, unchanged
        """
        self._execute(build_update(record, fields, self.dialect), "update")
        return record

    def update_all_in_batch(
        self,
        records: Iterable[Any],
        *extra_groups: Iterable[Any],
        fields: Optional[Iterable[str]] = None,
        batch_size: Optional[int] = None,
    ) -> None:
        """Update one or more record collections in batches."""
        groups = [list(records)] + [list(group) for group in extra_groups]
        if self._is_empty(groups, "update_all_in_batch"):
            return
        fields = None if fields is None else list(fields)
        for group in groups:
            if group:
                self._execute_batches(
                    self.planner.plan_updates(group, fields=fields, batch_size=batch_size), "update_all_in_batch"
                )

    def delete_all_in_batch(
        self,
        key_values: Iterable[Any],
        model: type,
        *extra_groups: Iterable[Any],
        batch_size: Optional[int] = None,
    ) -> None:
        """
        Delete rows by key, one DELETE per key, executed in batches.

        Args:
            key_values: Keys (or records) of ``model``
            model: Record type of ``key_values``
            *extra_groups: More record collections, each deleted from the table of its own record type
            batch_size: Rows per batch, the configured default when omitted
        """
        groups = [(list(key_values), model)]
        for group in extra_groups:
            records = list(group)
            groups.append((records, type(records[0]) if records else None))
        if self._is_empty([keys for keys, _ in groups], "delete_all_in_batch"):
            return
        for keys, group_model in groups:
            if keys:
                self._execute_batches(
                    self.planner.plan_deletes(keys, group_model, batch_size=batch_size), "delete_all_in_batch"
                )

    def delete_by_ids(self, key_values: Iterable[Any], model: type) -> int:
        """
        Delete rows of ``model`` whose key is in ``key_values`` with one statement.

        :returns: Affected row count reported by the executor, 0 for no keys
        """
        key_values = list(key_values)
        if self._is_empty([key_values], "delete_by_ids"):
            return 0
        return self._execute(build_delete_all(key_values, model), "delete_by_ids")
