# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Dialect capability data.

A dialect is plain data: which multi-row insert shape the engine accepts, how it
spells "next sequence value", and how it generates a bounded run of rows for
sequence reservation. Nothing here branches on product names at build time;
:func:`resolve_dialect` maps a product name and version to one of the presets.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional

from .config import get_settings
from .constants import ErrorMessages, InsertStrategy, LoggingConstants, SQLConstants
from .exceptions import ArgumentError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(SQLConstants.IDENTIFIER_PATTERN)


def validate_identifier(identifier: str) -> str:
    """
    Check that a sequence or table identifier is safe to splice into SQL text.

    :raises ArgumentError: If ``identifier`` is not a plain or schema-qualified name
    """
    if not isinstance(identifier, str) or not _IDENTIFIER.match(identifier):
        raise ArgumentError(ErrorMessages.INVALID_IDENTIFIER.format(identifier=identifier))
    return identifier


@dataclass(frozen=True)
class Dialect:
    """
    Statement-shape capabilities of one SQL engine.

    :ivar name: Short dialect name
    :ivar insert_strategy: Shape used when several rows go into one statement
    :ivar nextval_template: Next-value expression, formatted with ``sequence``
    :ivar sequence_row_generator: Derived table yielding ``count`` rows
    :ivar sequence_row_index: Row-number expression inside that derived table
    :ivar parenthesize_update_set: Wrap the SET assignments in parentheses
    """
    name: str
    insert_strategy: InsertStrategy
    nextval_template: str
    sequence_row_generator: str
    sequence_row_index: str
    parenthesize_update_set: bool = False

    def nextval(self, sequence: str) -> str:
        return self.nextval_template.format(sequence=validate_identifier(sequence))

    def row_generator(self, count: int) -> str:
        return self.sequence_row_generator.format(count=count)


GENERIC = Dialect(
    name="generic",
    insert_strategy=InsertStrategy.MULTI_ROW,
    nextval_template="nextval('{sequence}')",
    sequence_row_generator="(SELECT level FROM dual CONNECT BY level <= {count})",
    sequence_row_index="rownum",
    parenthesize_update_set=True,
)

POSTGRESQL = Dialect(
    name="postgresql",
    insert_strategy=InsertStrategy.MULTI_ROW,
    nextval_template="nextval('{sequence}')",
    sequence_row_generator="generate_series(1, {count}) AS gs(n)",
    sequence_row_index="gs.n",
)

SQLITE = Dialect(
    name="sqlite",
    insert_strategy=InsertStrategy.MULTI_ROW,
    nextval_template="nextval('{sequence}')",
    sequence_row_generator=(
        "(WITH RECURSIVE gs(n) AS (SELECT 1 UNION ALL SELECT n + 1 FROM gs WHERE n < {count}) "
        "SELECT n FROM gs) gs"
    ),
    sequence_row_index="gs.n",
)

MYSQL = Dialect(
    name="mysql",
    insert_strategy=InsertStrategy.MULTI_ROW,
    nextval_template="nextval({sequence})",
    sequence_row_generator=(
        "(WITH RECURSIVE gs(n) AS (SELECT 1 UNION ALL SELECT n + 1 FROM gs WHERE n < {count}) "
        "SELECT n FROM gs) gs"
    ),
    sequence_row_index="gs.n",
)

ORACLE = Dialect(
    name="oracle",
    insert_strategy=InsertStrategy.MULTI_ROW,
    nextval_template="{sequence}.nextval",
    sequence_row_generator="(SELECT level FROM dual CONNECT BY level <= {count})",
    sequence_row_index="rownum",
)

ORACLE_LEGACY = Dialect(
    name="oracle_legacy",
    insert_strategy=InsertStrategy.FAN_OUT,
    nextval_template="{sequence}.nextval",
    sequence_row_generator="(SELECT level FROM dual CONNECT BY level <= {count})",
    sequence_row_index="rownum",
)

_DIALECTS: Dict[str, Dialect] = {
    dialect.name: dialect
    for dialect in (GENERIC, POSTGRESQL, SQLITE, MYSQL, ORACLE, ORACLE_LEGACY)
}


def get_dialect(name: str) -> Dialect:
    """Look up a preset by name, falling back to :data:`GENERIC`."""
    dialect = _DIALECTS.get(name.lower())
    if dialect is None:
        logger.warning(LoggingConstants.UNKNOWN_DIALECT.format(name=name))
        return GENERIC
    return dialect


def resolve_dialect(
    product_name: str,
    major_version: Optional[int] = None,
    fan_out_below_version: Optional[int] = None,
) -> Dialect:
    """
    Map a database product name and major version to a dialect preset.

    Args:
        product_name: Product name as reported by the driver, e.g. ``"Oracle"``
        major_version: Engine major version, when known
        fan_out_below_version: Oracle versions below this use INSERT ALL fan-out;
            defaults to the configured ``fan_out_below_version``

    Returns:
        The matching :class:`Dialect`
    """
    product = product_name.strip().lower()
    if "oracle" in product:
        if fan_out_below_version is None:
            fan_out_below_version = get_settings().fan_out_below_version
        if major_version is not None and major_version < fan_out_below_version:
            return ORACLE_LEGACY
        return ORACLE
    if "postgres" in product:
        return POSTGRESQL
    if "sqlite" in product:
        return SQLITE
    if "mysql" in product or "mariadb" in product:
        return MYSQL
    return get_dialect(product)
