# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Sequence value reservation and distribution.

:class:`SequenceAllocator` reserves values for several sequences in one round
trip; :func:`distribute_sequence_values` hands them out to records, letting each
reserved value cover ``allocation_size`` consecutive records the way a sequence
INCREMENT BY block does.
"""

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence

from .constants import ErrorMessages, LoggingConstants, SequenceConstants, SQLConstants
from .exceptions import AllocationBoundsError, ArgumentError
from .sql_dialects import ORACLE, Dialect
from .sql_orm import require_sequence_name, set_field_value

if TYPE_CHECKING:
    from .sql_executors import SqlExecutor

logger = logging.getLogger(__name__)


@dataclass
class EntriesWithSequence:
    """
    Records that take their key from a sequence.

    :ivar entries: Records to key, in insertion order
    :ivar sequence_field: Field (or dotted path such as ``embedded_id.id``) receiving the value
    :ivar sequence_name: Sequence to draw from; resolved from the model when empty
    :ivar allocation_size: Records covered by one reserved value; 0 is treated as 1
    """
    entries: List[Any]
    sequence_field: str
    sequence_name: Optional[str] = None
    allocation_size: int = SequenceConstants.DEFAULT_ALLOCATION_SIZE
    _resolved_name: Optional[str] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self.entries = list(self.entries)
        if not self.sequence_field:
            raise ArgumentError(ErrorMessages.EMPTY_SEQUENCE_FIELD)
        if self.allocation_size < 0:
            raise ArgumentError(ErrorMessages.INVALID_ALLOCATION_SIZE.format(value=self.allocation_size))

    @property
    def effective_allocation_size(self) -> int:
        return max(self.allocation_size, 1)

    @property
    def required_count(self) -> int:
        return required_sequence_count(len(self.entries), self.allocation_size)

    def resolve_sequence_name(self) -> str:
        if self.sequence_name:
            return self.sequence_name
        if self._resolved_name is None:
            if not self.entries:
                raise ArgumentError(ErrorMessages.EMPTY_RECORDS.format(operation="resolve_sequence_name"))
            self._resolved_name = require_sequence_name(type(self.entries[0]), self.sequence_field)
        return self._resolved_name


def required_sequence_count(record_count: int, allocation_size: int) -> int:
    """Number of reserved values needed to key ``record_count`` records."""
    if allocation_size < 0:
        raise ArgumentError(ErrorMessages.INVALID_ALLOCATION_SIZE.format(value=allocation_size))
    return math.ceil(record_count / max(allocation_size, 1))


def distribute_sequence_values(
    records: Sequence[Any],
    reserved: Sequence[int],
    allocation_size: int,
    sequence_field: str,
) -> Sequence[Any]:
    """
    Assign reserved sequence values to records in place.

    Record ``i`` receives ``reserved[i // a] + i % a``: with reserved values
    ``[100, 200]`` and an allocation size of 2, four records get 100, 101, 200, 201.

    :param records: Records to key, in order
    :param reserved: Values returned by the allocator
    :param allocation_size: Records covered by one reserved value; 0 is treated as 1
    :param sequence_field: Field (or dotted path) receiving the value
    :returns: ``records``, for chaining
    :raises AllocationBoundsError: If ``reserved`` is shorter than ``ceil(n / a)``
    """
    required = required_sequence_count(len(records), allocation_size)
    if len(reserved) < required:
        raise AllocationBoundsError(
            ErrorMessages.RESERVATION_TOO_SHORT.format(
                available=len(reserved),
                required=required,
                records=len(records),
                allocation_size=allocation_size,
            )
        )

    step = max(allocation_size, 1)
    for index, record in enumerate(records):
        set_field_value(record, sequence_field, reserved[index // step] + index % step)
    return records


def _column_alias(sequence: str) -> str:
    return SequenceConstants.COLUMN_PREFIX + sequence.replace(".", "_")


def build_sequence_reservation_query(counts: Mapping[str, int], dialect: Dialect = ORACLE) -> str:
    """
    Build the single query reserving ``counts[name]`` values from each sequence.

    One ``CASE WHEN <row> <= n THEN <nextval> ELSE null END`` column per sequence
    is selected over a row generator bounded by the largest count.

    :raises ArgumentError: If a count is negative or a name is not an identifier
    """
    for sequence, count in counts.items():
        if count < 0:
            raise ArgumentError(ErrorMessages.INVALID_SEQUENCE_COUNT.format(sequence=sequence, count=count))

    columns = [
        SequenceConstants.CASE_TEMPLATE.format(
            row_index=dialect.sequence_row_index,
            count=count,
            nextval=dialect.nextval(sequence),
            alias=_column_alias(sequence),
        )
        for sequence, count in counts.items()
    ]
    upper_bound = max(counts.values(), default=0)
    return (
        f"{SQLConstants.SELECT} {SQLConstants.COLUMN_SEPARATOR.join(columns)} "
        f"{SQLConstants.FROM} {dialect.row_generator(upper_bound)}"
    )


class SequenceAllocator:
    """
    Reserve sequence values in one round trip through an executor.

    :param executor: Anything implementing ``fetch_all(query, bindings)``
    :param dialect: Supplies the next-value token and the row generator
    """

    def __init__(self, executor: "SqlExecutor", dialect: Dialect = ORACLE):
        self.executor = executor
        self.dialect = dialect

    def allocate(self, counts: Mapping[str, int]) -> Dict[str, List[int]]:
        """
        Reserve values for each named sequence.

        :param counts: Sequence name to number of values wanted
        :returns: Sequence name to exactly that many values, in allocation order;
            surplus values returned by the database are dropped
        :raises AllocationBoundsError: If the database returns fewer values than requested
        """
        result: Dict[str, List[int]] = {sequence: [] for sequence in counts}
        requested = OrderedDict((sequence, count) for sequence, count in counts.items() if count != 0)
        if not requested:
            return result

        query = build_sequence_reservation_query(requested, self.dialect)
        rows = self.executor.fetch_all(query, {})

        for position, (sequence, count) in enumerate(requested.items()):
            values = [int(row[position]) for row in rows if row[position] is not None]
            if len(values) < count:
                raise AllocationBoundsError(
                    ErrorMessages.RESERVATION_COUNT_MISMATCH.format(
                        sequence=sequence, returned=len(values), requested=count
                    )
                )
            result[sequence] = values[:count]

        logger.debug(LoggingConstants.SEQUENCES_RESERVED.format(counts=dict(requested)))
        return result

    def assign(self, groups: Sequence[EntriesWithSequence]) -> Sequence[EntriesWithSequence]:
        """
        Reserve and distribute keys for several record groups at once.

        Groups sharing a sequence draw consecutive slices of one reservation.
        """
        counts: Dict[str, int] = OrderedDict()
        for group in groups:
            if group.entries:
                sequence = group.resolve_sequence_name()
                counts[sequence] = counts.get(sequence, 0) + group.required_count

        reserved = self.allocate(counts)
        offsets: Dict[str, int] = {sequence: 0 for sequence in reserved}
        for group in groups:
            if not group.entries:
                continue
            sequence = group.resolve_sequence_name()
            start = offsets[sequence]
            end = start + group.required_count
            distribute_sequence_values(
                group.entries, reserved[sequence][start:end], group.allocation_size, group.sequence_field
            )
            offsets[sequence] = end
        return groups
