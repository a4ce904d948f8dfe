# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
BatchAlchemy: metadata-driven SQL generation and bulk writes for pydantic records.
"""

from __future__ import annotations

from .config import BatchSettings, get_settings, reset_settings
from .constants import InsertStrategy, ParamStyle, PrimaryKeyKind, RelationshipKind
from .exceptions import (
    AllocationBoundsError,
    ArgumentError,
    BatchAlchemyError,
    MetadataResolutionError,
    StateError,
)
from .sql_batch_planner import (
    BatchPlanner,
    plan,
    plan_batch_deletes,
    plan_batch_inserts,
    plan_batch_inserts_with_sequence,
    plan_batch_updates,
    plan_rewritten_batch_inserts,
)
from .sql_dialects import (
    GENERIC,
    MYSQL,
    ORACLE,
    ORACLE_LEGACY,
    POSTGRESQL,
    SQLITE,
    Dialect,
    get_dialect,
    resolve_dialect,
)
from .sql_executors import DBAPIExecutor, SqlExecutor
from .sql_orm import (
    ColumnDescriptor,
    EntityField,
    EntityMetadata,
    MetadataRegistry,
    PrimaryKeyFields,
    SqlBaseModel,
    SqlEmbeddable,
    SqlFieldMetadata,
    clear_registry,
    embedded_id,
    get_field_value,
    get_id_fields,
    get_key_fields,
    get_primary_key,
    relationship,
    require_sequence_name,
    resolve,
    resolve_sequence_name,
    set_field_value,
    sql_field,
    sql_table,
    to_column_name,
)
from .sql_query_builder import (
    BatchData,
    BindingCounter,
    QueryData,
    build_delete,
    build_delete_all,
    build_dialect_insert_all,
    build_insert,
    build_insert_with_sequence_id,
    build_multi_insert,
    build_sequence_derived_insert,
    build_update,
    build_where_clause_for_keys,
    clear_position_placeholder_indexes,
    columns_with_id_first,
)
from .sql_sequence import (
    EntriesWithSequence,
    SequenceAllocator,
    build_sequence_reservation_query,
    distribute_sequence_values,
    required_sequence_count,
)
from .sql_session import BatchSession

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "BatchSettings",
    "get_settings",
    "reset_settings",
    # Enums
    "InsertStrategy",
    "ParamStyle",
    "PrimaryKeyKind",
    "RelationshipKind",
    # Errors
    "BatchAlchemyError",
    "MetadataResolutionError",
    "ArgumentError",
    "AllocationBoundsError",
    "StateError",
    # Metadata
    "SqlBaseModel",
    "SqlEmbeddable",
    "SqlFieldMetadata",
    "ColumnDescriptor",
    "EntityField",
    "EntityMetadata",
    "PrimaryKeyFields",
    "MetadataRegistry",
    "sql_table",
    "sql_field",
    "embedded_id",
    "relationship",
    "resolve",
    "resolve_sequence_name",
    "require_sequence_name",
    "to_column_name",
    "get_primary_key",
    "get_id_fields",
    "get_key_fields",
    "get_field_value",
    "set_field_value",
    "clear_registry",
    # Dialects
    "Dialect",
    "GENERIC",
    "POSTGRESQL",
    "SQLITE",
    "MYSQL",
    "ORACLE",
    "ORACLE_LEGACY",
    "get_dialect",
    "resolve_dialect",
    # Statements
    "QueryData",
    "BatchData",
    "BindingCounter",
    "build_insert",
    "build_multi_insert",
    "build_insert_with_sequence_id",
    "build_dialect_insert_all",
    "build_sequence_derived_insert",
    "build_update",
    "build_delete",
    "build_delete_all",
    "build_where_clause_for_keys",
    "columns_with_id_first",
    "clear_position_placeholder_indexes",
    # Sequences
    "EntriesWithSequence",
    "SequenceAllocator",
    "build_sequence_reservation_query",
    "distribute_sequence_values",
    "required_sequence_count",
    # Planning and execution
    "BatchPlanner",
    "plan",
    "plan_batch_inserts",
    "plan_batch_inserts_with_sequence",
    "plan_batch_updates",
    "plan_batch_deletes",
    "plan_rewritten_batch_inserts",
    "SqlExecutor",
    "DBAPIExecutor",
    "BatchSession",
]
