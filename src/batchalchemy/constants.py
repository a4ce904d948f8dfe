# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Constants module for BatchAlchemy.

This module centralizes the SQL keywords, metadata attribute names, batch defaults
and error message templates used throughout the BatchAlchemy codebase. No magic
values are allowed elsewhere.

:module: constants
:synopsis: Centralized constants and configuration for BatchAlchemy
:author: BatchAlchemy Contributors
"""

from __future__ import annotations

from enum import Enum
from typing import Final


# ============================================================================
# STATEMENT SHAPES
# ============================================================================

class InsertStrategy(Enum):
    """
    Multi-row insert statement shapes supported by a dialect.

    :class: InsertStrategy
    :synopsis: Tagged variant selecting how several rows become one statement
    """

    MULTI_ROW = "multi_row"                # INSERT INTO t (...) VALUES (...), (...)
    FAN_OUT = "fan_out"                    # INSERT ALL INTO t (...) VALUES (...) ... SELECT * FROM dual
    SEQUENCE_DERIVED = "sequence_derived"  # INSERT INTO t (...) SELECT seq.nextval, mt.* FROM (...) mt


class RelationshipKind(Enum):
    """
    Relationship markers. Fields carrying one are never mapped to a column.

    :class: RelationshipKind
    :synopsis: Enumeration of relationship multiplicities
    """

    ONE_TO_MANY = "ONE_MANY"
    MANY_TO_ONE = "MANY_ONE"
    MANY_TO_MANY = "MANY_MANY"


class PrimaryKeyKind(Enum):
    """
    Primary-key shapes a record type may declare.

    :class: PrimaryKeyKind
    :synopsis: Enumeration of primary-key shapes
    """

    SINGLE = "single"
    EMBEDDED_ID = "embedded_id"
    ID_CLASS = "id_class"


class ParamStyle(Enum):
    """PEP 249 parameter styles understood by the DB-API executor."""

    QMARK = "qmark"
    NUMERIC = "numeric"
    NAMED = "named"
    FORMAT = "format"


# ============================================================================
# SQL GENERATION CONSTANTS
# ============================================================================

class SQLConstants:
    """SQL keywords and separators used by the statement builder."""

    # @@ STEP 1: Statement keywords
    INSERT_INTO: Final[str] = "INSERT INTO"
    INSERT_ALL: Final[str] = "INSERT ALL"
    INTO: Final[str] = "INTO"
    VALUES: Final[str] = "VALUES"
    UPDATE: Final[str] = "UPDATE"
    SET: Final[str] = "SET"
    DELETE_FROM: Final[str] = "DELETE FROM"
    WHERE: Final[str] = "WHERE"
    SELECT: Final[str] = "SELECT"
    FROM: Final[str] = "FROM"
    AND: Final[str] = "AND"
    OR: Final[str] = "OR"
    AS: Final[str] = "as"
    UNION_ALL: Final[str] = "UNION ALL"

    # @@ STEP 2: Dialect fan-out and derived-table fragments
    FAN_OUT_TERMINATOR: Final[str] = "SELECT * FROM dual"
    FROM_DUAL: Final[str] = "FROM DUAL"
    DERIVED_TABLE_ALIAS: Final[str] = "mt"

    # @@ STEP 3: Placeholders and separators
    PLACEHOLDER: Final[str] = "?"
    COLUMN_SEPARATOR: Final[str] = ", "
    EQUALS: Final[str] = " = "

    # @@ STEP 4: Regular expressions
    # || S.4.1: Indexed placeholder such as ?12
    INDEXED_PLACEHOLDER_PATTERN: Final[str] = r"\?(\d+)"
    # || S.4.2: Run of capitals not preceded by '-', '_' or another capital
    CAMEL_BOUNDARY_PATTERN: Final[str] = r"(?<![\-_A-Z])[A-Z]+"
    # || S.4.3: Plain or schema-qualified SQL identifier
    IDENTIFIER_PATTERN: Final[str] = r"^[A-Za-z_][A-Za-z0-9_$#]*(\.[A-Za-z_][A-Za-z0-9_$#]*)?$"


class SequenceConstants:
    """Sequence reservation query fragments."""

    COLUMN_PREFIX: Final[str] = "SEQUENCE_"
    CASE_TEMPLATE: Final[str] = (
        "(CASE WHEN {row_index} <= {count} THEN {nextval} ELSE null END) as {alias}"
    )
    DEFAULT_ALLOCATION_SIZE: Final[int] = 1


# ============================================================================
# METADATA CONSTANTS
# ============================================================================

class ModelMetadataConstants:
    """Model metadata attribute constants."""

    # @@ STEP 1: Class attributes written by @sql_table
    SQL_TABLE_NAME: Final[str] = "__sql_table_name__"
    SQL_SEQUENCE_NAME: Final[str] = "__sql_sequence_name__"
    SQL_ID_CLASS: Final[str] = "__sql_id_class__"
    IS_SQL_TABLE: Final[str] = "__is_sql_table__"

    # @@ STEP 2: Field metadata key inside json_schema_extra
    SQL_FIELD_METADATA: Final[str] = "sql_metadata"

    # @@ STEP 3: Dotted path separator for embedded-id fields
    FIELD_PATH_SEPARATOR: Final[str] = "."


# ============================================================================
# BATCH CONSTANTS
# ============================================================================

class BatchConstants:
    """Default batch planning values."""

    DEFAULT_BATCH_SIZE: Final[int] = 500
    DEFAULT_REWRITE_BATCH_INSERTS: Final[bool] = False
    DEFAULT_REWRITTEN_INSERT_SIZE: Final[int] = 10
    # Engines older than this major version lack the multi-row VALUES form
    DEFAULT_FAN_OUT_BELOW_VERSION: Final[int] = 23
    SETTINGS_ENV_PREFIX: Final[str] = "BATCHALCHEMY_"


class LoggingConstants:
    """Log message templates."""

    METADATA_RESOLVED: Final[str] = "Resolved metadata for {model_name}: table={table}, columns={count}, key={kind}"
    BATCH_PLANNED: Final[str] = "Planned {batches} batch(es) for {records} {model_name} record(s)"
    EXECUTING_BATCH: Final[str] = "Executing batch of {rows} row(s): {query}"
    EXECUTING_QUERY: Final[str] = "Executing query: {query}"
    SEQUENCES_RESERVED: Final[str] = "Reserved sequence values: {counts}"
    EMPTY_INPUT: Final[str] = "{operation} called with no records, nothing to do"
    UNKNOWN_DIALECT: Final[str] = "Unknown dialect '{name}', using generic statement shapes"
    EMBEDDED_ID_PRECEDENCE: Final[str] = (
        "Model {model_name} declares an embedded id alongside {other}; the embedded id is used"
    )


# ============================================================================
# ERROR MESSAGES
# ============================================================================

class ErrorMessages:
    """Error message constants."""

    # @@ STEP 1: Metadata resolution errors
    NOT_A_TABLE: Final[str] = "Model {model_name} is not decorated with @sql_table"
    MISSING_PRIMARY_KEY: Final[str] = "Model {model_name} has no primary key fields and no embedded id"
    TRANSIENT_PRIMARY_KEY: Final[str] = "A transient field cannot be part of the primary key"
    MULTIPLE_EMBEDDED_IDS: Final[str] = "Model {model_name} declares more than one embedded id"
    EMBEDDED_ID_NOT_EMBEDDABLE: Final[str] = (
        "Embedded id field {field_name} of {model_name} must be annotated with a SqlEmbeddable subclass"
    )
    FIELD_NOT_FOUND: Final[str] = "Field {field_name} not found in model {model_name}"
    SEQUENCE_NOT_FOUND: Final[str] = "No sequence name resolvable for {model_name}"
    KEY_SHAPE_MISMATCH: Final[str] = (
        "Key value {value!r} does not match the {expected} key columns of {model_name}"
    )

    # @@ STEP 2: Argument errors
    EMPTY_RECORDS: Final[str] = "{operation} requires at least one record"
    NO_RECORDS_FOR_FAN_OUT: Final[str] = "No records supplied in any group for a fan-out insert"
    MIXED_RECORD_TYPES: Final[str] = "All records must share one type, got {first} and {other}"
    EMPTY_UPDATE_FIELDS: Final[str] = "Update field subset for {model_name} is empty"
    KEY_ONLY_UPDATE_FIELDS: Final[str] = (
        "Update field subset for {model_name} contains only primary-key fields: {fields}"
    )
    NO_UPDATABLE_COLUMNS: Final[str] = "Model {model_name} has no non-key columns to update"
    INVALID_BATCH_SIZE: Final[str] = "{name} must be at least 1, got {value}"
    INVALID_ALLOCATION_SIZE: Final[str] = "Allocation size must not be negative, got {value}"
    INVALID_SEQUENCE_COUNT: Final[str] = "Requested count for sequence {sequence} must not be negative, got {count}"
    INVALID_IDENTIFIER: Final[str] = "Invalid SQL identifier: {identifier!r}"
    EMPTY_SEQUENCE_FIELD: Final[str] = "Sequence field must be a non-empty field name"
    UNSUPPORTED_PARAMSTYLE: Final[str] = "Unsupported DB-API paramstyle: {paramstyle}"
    TEMPLATE_MISMATCH: Final[str] = (
        "Row {index} of {model_name} produced a statement shape different from the batch template"
    )

    # @@ STEP 3: Allocation errors
    RESERVATION_TOO_SHORT: Final[str] = (
        "Sequence reservation holds {available} value(s), {required} required for "
        "{records} record(s) with allocation size {allocation_size}"
    )
    RESERVATION_COUNT_MISMATCH: Final[str] = (
        "Sequence {sequence} returned only {returned} value(s), {requested} requested"
    )

    # @@ STEP 4: State errors
    NO_EXECUTOR: Final[str] = "Session has no SQL executor; cannot run {operation}"
