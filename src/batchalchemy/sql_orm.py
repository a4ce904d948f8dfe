# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Table metadata for pydantic records: decorators, field markers and the resolver.

A record type is declared once with ``@sql_table`` and ``sql_field(...)`` markers.
The resolver turns that declaration into an :class:`EntityMetadata` descriptor
(table name, ordered columns, primary-key shape) which is computed once per type
and cached in a process-wide registry keyed by type identity. Each column carries
a getter/setter pair so values are never looked up by name at statement-build time.
"""

from __future__ import annotations

import logging
import operator
import re
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass, field
from threading import RLock
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from pydantic import BaseModel, ConfigDict, Field
from pydantic.fields import FieldInfo

from .constants import (
    ErrorMessages,
    LoggingConstants,
    ModelMetadataConstants,
    PrimaryKeyKind,
    RelationshipKind,
    SQLConstants,
)
from .exceptions import ArgumentError, MetadataResolutionError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CAMEL_BOUNDARY = re.compile(SQLConstants.CAMEL_BOUNDARY_PATTERN)


# -----------------------------------------------------------------------------
# Field metadata
# -----------------------------------------------------------------------------

@dataclass
class SqlFieldMetadata:
    """
    Metadata attached to a pydantic field.

    :class: SqlFieldMetadata
    :synopsis: Column mapping and key markers for a single field
    """
    column: Optional[str] = None
    primary_key: bool = False
    generated: bool = False
    sequence_name: Optional[str] = None
    transient: bool = False
    embedded_id: bool = False
    relationship: Optional[RelationshipKind] = None


def _attach_metadata(
    metadata: SqlFieldMetadata,
    default: Any,
    default_factory: Optional[Callable[[], Any]],
    alias: Optional[str],
    description: Optional[str],
    json_schema_extra: Optional[Dict[str, Any]],
) -> Any:
    if type(json_schema_extra) is not dict:
        json_schema_extra = {}
    json_schema_extra[ModelMetadataConstants.SQL_FIELD_METADATA] = metadata

    field_kwargs = {
        "json_schema_extra": json_schema_extra,
        "alias": alias,
        "description": description,
    }
    if default_factory is not None:
        return Field(default_factory=default_factory, **field_kwargs)
    return Field(default=default, **field_kwargs)


def sql_field(
    default: Any = ...,
    *,
    column: Optional[str] = None,
    primary_key: bool = False,
    generated: bool = False,
    sequence_name: Optional[str] = None,
    transient: bool = False,
    default_factory: Optional[Callable[[], Any]] = None,
    alias: Optional[str] = None,
    description: Optional[str] = None,
    json_schema_extra: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Create a Pydantic Field with attached column metadata.

    Args:
        default: Default value for the field
        column: Explicit column name; derived from the field name when omitted
        primary_key: Mark the field as (part of) the primary key
        generated: The database generates the value (sequence or identity)
        sequence_name: Sequence feeding this field, checked before the class-level one
        transient: Keep the field on the model but never map it to a column
    """
    if transient and primary_key:
        raise MetadataResolutionError(ErrorMessages.TRANSIENT_PRIMARY_KEY)

    metadata = SqlFieldMetadata(
        column=column,
        primary_key=primary_key,
        generated=generated,
        sequence_name=sequence_name,
        transient=transient,
    )
    return _attach_metadata(metadata, default, default_factory, alias, description, json_schema_extra)


def embedded_id(
    default: Any = None,
    *,
    default_factory: Optional[Callable[[], Any]] = None,
    alias: Optional[str] = None,
    description: Optional[str] = None,
) -> Any:
    """Mark a field holding a :class:`SqlEmbeddable` whose fields form the primary key."""
    metadata = SqlFieldMetadata(embedded_id=True, primary_key=True)
    return _attach_metadata(metadata, default, default_factory, alias, description, None)


def relationship(
    kind: RelationshipKind,
    default: Any = None,
    *,
    default_factory: Optional[Callable[[], Any]] = None,
) -> Any:
    """Mark an association field; it is never mapped to a column."""
    metadata = SqlFieldMetadata(relationship=kind)
    return _attach_metadata(metadata, default, default_factory, None, None, None)


# -----------------------------------------------------------------------------
# Resolved descriptors
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EntityField:
    """A column bound to the value it holds on one record."""
    field_name: str
    column_name: str
    is_primary_key: bool
    is_generated_value: bool
    value: Any


@dataclass(frozen=True)
class ColumnDescriptor:
    """
    One mapped column of a record type.

    :ivar field_name: Field name on the model, or on the embedded id holder
    :ivar column_name: Explicit or derived column name
    :ivar holder_field: Field of the owning model holding the embedded id, if any
    :ivar getter: Reads the column value from a record
    :ivar setter: Writes the column value onto a record
    """
    field_name: str
    column_name: str
    is_primary_key: bool
    is_generated_value: bool
    sequence_name: Optional[str]
    holder_field: Optional[str]
    getter: Callable[[Any], Any] = field(compare=False, repr=False)
    setter: Callable[[Any, Any], None] = field(compare=False, repr=False)

    @property
    def path(self) -> str:
        """Dotted path from the owning record, e.g. ``embedded_id.id``."""
        if self.holder_field is None:
            return self.field_name
        return f"{self.holder_field}{ModelMetadataConstants.FIELD_PATH_SEPARATOR}{self.field_name}"

    def bind(self, record: Any) -> EntityField:
        return self.bind_value(self.getter(record))

    def bind_value(self, value: Any) -> EntityField:
        return EntityField(
            field_name=self.field_name,
            column_name=self.column_name,
            is_primary_key=self.is_primary_key,
            is_generated_value=self.is_generated_value,
            value=value,
        )


@dataclass(frozen=True)
class PrimaryKeyFields:
    """
    Primary-key shape of a record type.

    :ivar kind: Single key, embedded id or id-class key
    :ivar columns: Key columns in declaration order
    :ivar holder_type: Embeddable type for an embedded id
    :ivar holder_field_name: Field holding the embedded id
    :ivar id_class: External key-holder type for an id-class key
    """
    kind: PrimaryKeyKind
    columns: Tuple[ColumnDescriptor, ...]
    holder_type: Optional[Type[BaseModel]] = None
    holder_field_name: Optional[str] = None
    id_class: Optional[type] = None

    @property
    def field_names(self) -> List[str]:
        return [column.field_name for column in self.columns]

    @property
    def is_composite(self) -> bool:
        return len(self.columns) > 1


@dataclass(frozen=True)
class EntityMetadata:
    """
    Resolved, immutable description of a record type.

    :class: EntityMetadata
    :synopsis: Table name, columns and primary-key shape for one model
    """
    model: type
    table_name: Optional[str]
    columns: Tuple[ColumnDescriptor, ...]
    primary_key: PrimaryKeyFields
    sequence_name: str

    def require_table_name(self) -> str:
        """
        Return the table name for table-qualified statements.

        :raises MetadataResolutionError: If the model has no ``@sql_table`` decorator
        """
        if self.table_name is None:
            raise MetadataResolutionError(
                ErrorMessages.NOT_A_TABLE.format(model_name=self.model.__name__)
            )
        return self.table_name

    @property
    def key_columns(self) -> Tuple[ColumnDescriptor, ...]:
        return self.primary_key.columns

    @property
    def non_key_columns(self) -> Tuple[ColumnDescriptor, ...]:
        return tuple(column for column in self.columns if not column.is_primary_key)

    @property
    def column_names(self) -> List[str]:
        return [column.column_name for column in self.columns]

    def column_for(self, field_name: str) -> ColumnDescriptor:
        """
        Find a column by dotted path or by plain field name.

        :param field_name: ``name``, ``id`` or ``embedded_id.id``
        :raises MetadataResolutionError: If no column maps that field
        """
        for column in self.columns:
            if column.path == field_name:
                return column
        for column in self.columns:
            if column.field_name == field_name:
                return column
        raise MetadataResolutionError(
            ErrorMessages.FIELD_NOT_FOUND.format(field_name=field_name, model_name=self.model.__name__)
        )

    def bind(self, record: Any) -> List[EntityField]:
        """Bind every column to its value on ``record``, in column order."""
        return [column.bind(record) for column in self.columns]


# -----------------------------------------------------------------------------
# Global registry
# -----------------------------------------------------------------------------

class MetadataRegistry:
    """
    Process-wide cache of resolved metadata, keyed by model type.

    Resolution is deterministic, so two threads racing on the first lookup of a
    type compute the same descriptor; the lock only guards the dictionaries.
    """

    _instance: Optional["MetadataRegistry"] = None

    def __new__(cls) -> "MetadataRegistry":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self.__dict__.get("_initialized", False):
            return
        self._initialized = True

        # @@ STEP 1: Resolved descriptors
        self._metadata_cache: Dict[type, EntityMetadata] = {}

        # @@ STEP 2: Field metadata cache (hot path)
        # Keyed by id(field_info) because FieldInfo may not be hashable
        self._field_metadata_cache: Dict[int, Optional[SqlFieldMetadata]] = {}

        self._lock = RLock()

    def get_field_metadata(self, field_info: FieldInfo) -> Optional[SqlFieldMetadata]:
        """
        Get SQL metadata from field info with caching (hot path).

        :param field_info: Pydantic field info
        :type field_info: FieldInfo
        :returns: SQL field metadata or None
        :rtype: Optional[SqlFieldMetadata]
        """
        cache_key = id(field_info)
        if cache_key in self._field_metadata_cache:
            return self._field_metadata_cache[cache_key]

        result: Optional[SqlFieldMetadata] = None
        extra = field_info.json_schema_extra
        if extra and isinstance(extra, dict):
            meta = extra.get(ModelMetadataConstants.SQL_FIELD_METADATA)
            if isinstance(meta, SqlFieldMetadata):
                result = meta
            elif isinstance(meta, dict):
                result = SqlFieldMetadata(**meta)

        with self._lock:
            self._field_metadata_cache[cache_key] = result
        return result

    def resolve(self, model: type) -> EntityMetadata:
        cached = self._metadata_cache.get(model)
        if cached is not None:
            return cached

        metadata = _build_metadata(model, self)
        with self._lock:
            self._metadata_cache.setdefault(model, metadata)
        logger.debug(
            LoggingConstants.METADATA_RESOLVED.format(
                model_name=model.__name__,
                table=metadata.table_name,
                count=len(metadata.columns),
                kind=metadata.primary_key.kind.value,
            )
        )
        return self._metadata_cache[model]

    def clear(self) -> None:
        with self._lock:
            self._metadata_cache.clear()
            self._field_metadata_cache.clear()


# Singleton
_sql_registry = MetadataRegistry()


def clear_registry() -> None:
    """Drop every cached descriptor; types are re-resolved on next use."""
    _sql_registry.clear()


def resolve(model: Union[type, Any]) -> EntityMetadata:
    """
    Resolve (or fetch the cached) metadata for a model type or instance.

    :raises MetadataResolutionError: If the model has no resolvable primary key
    """
    if not isinstance(model, type):
        model = type(model)
    return _sql_registry.resolve(model)


# -----------------------------------------------------------------------------
# Decorators and base classes
# -----------------------------------------------------------------------------

def sql_table(
    name: Optional[str] = None,
    sequence_name: Optional[str] = None,
    id_class: Optional[type] = None,
) -> Callable[[Type[T]], Type[T]]:
    """Decorator mapping a model to a table."""

    def decorator(cls: Type[T]) -> Type[T]:
        table_name = name if name else cls.__name__

        setattr(cls, ModelMetadataConstants.SQL_TABLE_NAME, table_name)
        setattr(cls, ModelMetadataConstants.IS_SQL_TABLE, True)
        # Table name and id class are read from the decorated class itself, never inherited
        if sequence_name:
            setattr(cls, ModelMetadataConstants.SQL_SEQUENCE_NAME, sequence_name)
        if id_class is not None:
            setattr(cls, ModelMetadataConstants.SQL_ID_CLASS, id_class)
        return cls

    return decorator


class SqlEmbeddable(BaseModel):
    """Base model for composite key holders used with :func:`embedded_id`."""

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)


class SqlBaseModel(BaseModel):
    """Base model for all mapped records with metadata helpers."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True, validate_assignment=True, use_enum_values=False
    )

    @classmethod
    def get_sql_metadata(cls) -> EntityMetadata:
        return resolve(cls)

    @classmethod
    def get_table_name(cls) -> str:
        return resolve(cls).require_table_name()

    @classmethod
    def get_primary_key_fields(cls) -> List[str]:
        return resolve(cls).primary_key.field_names

    @classmethod
    def get_sequence_name(cls, field_name: Optional[str] = None) -> str:
        return resolve_sequence_name(cls, field_name)

    def get_primary_key(self) -> Any:
        return get_primary_key(self)

    def get_entity_fields(self) -> List[EntityField]:
        return resolve(type(self)).bind(self)


# Types never inspected while walking a model's hierarchy
_UNIVERSAL_BASES = (SqlBaseModel, SqlEmbeddable, BaseModel, object)


# -----------------------------------------------------------------------------
# Resolution
# -----------------------------------------------------------------------------

def to_column_name(field_name: str) -> str:
    """
    Derive a column name from a field name.

    A run of capitals not preceded by ``_``, ``-`` or another capital gets one
    underscore in front of it; a leading underscore is then dropped and the
    result is lower-cased (``firstName`` -> ``first_name``).
    """
    column = _CAMEL_BOUNDARY.sub(lambda match: "_" + match.group(0), field_name)
    if column.startswith("_"):
        column = column[1:]
    return column.lower()


def _unwrap_optional(annotation: Any) -> Any:
    if typing.get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _direct_accessors(name: str) -> Tuple[Callable[[Any], Any], Callable[[Any, Any], None]]:
    def setter(record: Any, value: Any) -> None:
        setattr(record, name, value)

    return operator.attrgetter(name), setter


def _embedded_accessors(
    holder_name: str, holder_type: Type[BaseModel], name: str
) -> Tuple[Callable[[Any], Any], Callable[[Any, Any], None]]:
    def getter(record: Any) -> Any:
        holder = getattr(record, holder_name)
        return None if holder is None else getattr(holder, name)

    def setter(record: Any, value: Any) -> None:
        holder = getattr(record, holder_name)
        if holder is None:
            setattr(record, holder_name, holder_type.model_construct())
            holder = getattr(record, holder_name)
        setattr(holder, name, value)

    return getter, setter


def _make_column(
    name: str,
    meta: Optional[SqlFieldMetadata],
    is_primary_key: bool,
    holder_field: Optional[str],
    accessors: Tuple[Callable[[Any], Any], Callable[[Any, Any], None]],
) -> ColumnDescriptor:
    column_name = meta.column if meta is not None and meta.column else to_column_name(name)
    getter, setter = accessors
    return ColumnDescriptor(
        field_name=name,
        column_name=column_name,
        is_primary_key=is_primary_key,
        is_generated_value=bool(meta and meta.generated),
        sequence_name=meta.sequence_name if meta is not None else None,
        holder_field=holder_field,
        getter=getter,
        setter=setter,
    )


def _embedded_columns(
    model: type, holder_name: str, field_info: FieldInfo, registry: MetadataRegistry
) -> Tuple[Type[BaseModel], List[ColumnDescriptor]]:
    holder_type = _unwrap_optional(field_info.annotation)
    if not (isinstance(holder_type, type) and issubclass(holder_type, BaseModel)):
        raise MetadataResolutionError(
            ErrorMessages.EMBEDDED_ID_NOT_EMBEDDABLE.format(field_name=holder_name, model_name=model.__name__)
        )

    columns: List[ColumnDescriptor] = []
    for name, sub_info in holder_type.model_fields.items():
        meta = registry.get_field_metadata(sub_info)
        if meta is not None and (meta.transient or meta.relationship is not None):
            continue
        columns.append(
            _make_column(name, meta, True, holder_name, _embedded_accessors(holder_name, holder_type, name))
        )
    return holder_type, columns


def _build_metadata(model: type, registry: MetadataRegistry) -> EntityMetadata:
    # @@ STEP 1: Walk the flattened field list (pydantic lists inherited fields first)
    # || S.1: ClassVar constants and private attributes are never pydantic fields
    model_fields: Dict[str, FieldInfo] = getattr(model, "model_fields", {})

    columns: List[ColumnDescriptor] = []
    embedded: Optional[Tuple[str, Type[BaseModel], List[ColumnDescriptor]]] = None
    loose_key_names: List[str] = []

    for name, field_info in model_fields.items():
        meta = registry.get_field_metadata(field_info)

        # @@ STEP 2: Skip associations and non-persistent fields
        if meta is not None and (meta.relationship is not None or meta.transient):
            continue

        # @@ STEP 3: Embedded id contributes the holder's fields as key columns
        if meta is not None and meta.embedded_id:
            if embedded is not None:
                raise MetadataResolutionError(
                    ErrorMessages.MULTIPLE_EMBEDDED_IDS.format(model_name=model.__name__)
                )
            holder_type, holder_columns = _embedded_columns(model, name, field_info, registry)
            embedded = (name, holder_type, holder_columns)
            columns.extend(holder_columns)
            continue

        # @@ STEP 4: Loose key fields
        is_key = bool(meta and meta.primary_key)
        if is_key:
            loose_key_names.append(name)
        columns.append(_make_column(name, meta, is_key, None, _direct_accessors(name)))

    id_class = model.__dict__.get(ModelMetadataConstants.SQL_ID_CLASS)

    # @@ STEP 5: Pick the key shape, embedded id first
    if embedded is not None:
        holder_name, holder_type, holder_columns = embedded
        if id_class is not None or loose_key_names:
            other = "an id class" if id_class is not None else f"key fields {loose_key_names}"
            logger.warning(
                LoggingConstants.EMBEDDED_ID_PRECEDENCE.format(model_name=model.__name__, other=other)
            )
            # || S.5.1: Loose key markers are demoted so only the embedded id is the key
            columns = [
                column if column.holder_field is not None or not column.is_primary_key
                else _demote(column)
                for column in columns
            ]
        primary_key = PrimaryKeyFields(
            kind=PrimaryKeyKind.EMBEDDED_ID,
            columns=tuple(holder_columns),
            holder_type=holder_type,
            holder_field_name=holder_name,
        )
    elif loose_key_names:
        key_columns = tuple(column for column in columns if column.is_primary_key)
        if id_class is not None or len(key_columns) > 1:
            kind = PrimaryKeyKind.ID_CLASS
        else:
            kind = PrimaryKeyKind.SINGLE
        primary_key = PrimaryKeyFields(kind=kind, columns=key_columns, id_class=id_class)
    else:
        raise MetadataResolutionError(
            ErrorMessages.MISSING_PRIMARY_KEY.format(model_name=model.__name__)
        )

    table_name = model.__dict__.get(ModelMetadataConstants.SQL_TABLE_NAME)
    return EntityMetadata(
        model=model,
        table_name=table_name,
        columns=tuple(columns),
        primary_key=primary_key,
        sequence_name=_class_sequence_name(model),
    )


def _demote(column: ColumnDescriptor) -> ColumnDescriptor:
    return ColumnDescriptor(
        field_name=column.field_name,
        column_name=column.column_name,
        is_primary_key=False,
        is_generated_value=column.is_generated_value,
        sequence_name=column.sequence_name,
        holder_field=None,
        getter=column.getter,
        setter=column.setter,
    )


def _class_sequence_name(model: type) -> str:
    for klass in model.__mro__:
        if klass in _UNIVERSAL_BASES:
            break
        sequence = klass.__dict__.get(ModelMetadataConstants.SQL_SEQUENCE_NAME)
        if sequence:
            return sequence
    return ""


def resolve_sequence_name(model: Union[type, Any], field_name: Optional[str] = None) -> str:
    """
    Resolve the sequence feeding a model's generated key.

    :param model: Model type or instance
    :param field_name: Field (or dotted path) whose own sequence marker is checked first
    :returns: The sequence name, or ``""`` when none is declared
    """
    metadata = resolve(model)
    if field_name:
        column = metadata.column_for(field_name)
        if column.sequence_name:
            return column.sequence_name
        holder_type = metadata.primary_key.holder_type
        if column.holder_field is not None and holder_type is not None:
            holder_sequence = _class_sequence_name(holder_type)
            if holder_sequence:
                return holder_sequence
    return metadata.sequence_name


def require_sequence_name(model: Union[type, Any], field_name: Optional[str] = None) -> str:
    """Like :func:`resolve_sequence_name` but fails when nothing is declared."""
    sequence = resolve_sequence_name(model, field_name)
    if not sequence:
        model_type = model if isinstance(model, type) else type(model)
        raise MetadataResolutionError(ErrorMessages.SEQUENCE_NOT_FOUND.format(model_name=model_type.__name__))
    return sequence


# -----------------------------------------------------------------------------
# Value access
# -----------------------------------------------------------------------------

def get_id_fields(record: Any) -> List[EntityField]:
    """Bind the primary-key columns of ``record`` to their values."""
    return [column.bind(record) for column in resolve(record).key_columns]


def get_primary_key(record: Any) -> Any:
    """
    Return the key of a record in the form its key shape declares.

    Single keys return the scalar, embedded ids the holder object, id-class keys
    an instance of the id class (or a tuple when none is declared).
    """
    metadata = resolve(record)
    pk = metadata.primary_key
    if pk.kind is PrimaryKeyKind.SINGLE:
        return pk.columns[0].getter(record)
    if pk.kind is PrimaryKeyKind.EMBEDDED_ID:
        return getattr(record, pk.holder_field_name)
    values = {column.field_name: column.getter(record) for column in pk.columns}
    if pk.id_class is not None:
        return pk.id_class(**values)
    return tuple(values.values())


def get_key_fields(key_value: Any, model: type) -> List[EntityField]:
    """
    Bind the key columns of ``model`` to the parts of a key value.

    :param key_value: Scalar, key holder object, mapping by field name, tuple in
        key-column order, or a record of ``model`` itself
    :raises ArgumentError: If the key value does not fit the key shape
    """
    metadata = resolve(model)
    key_columns = metadata.key_columns

    if isinstance(key_value, metadata.model):
        return [column.bind(key_value) for column in key_columns]

    if isinstance(key_value, Mapping):
        missing = [column.field_name for column in key_columns if column.field_name not in key_value]
        if missing:
            raise ArgumentError(
                ErrorMessages.KEY_SHAPE_MISMATCH.format(
                    value=key_value, expected=len(key_columns), model_name=metadata.model.__name__
                )
            )
        return [column.bind_value(key_value[column.field_name]) for column in key_columns]

    if isinstance(key_value, tuple):
        if len(key_value) != len(key_columns):
            raise ArgumentError(
                ErrorMessages.KEY_SHAPE_MISMATCH.format(
                    value=key_value, expected=len(key_columns), model_name=metadata.model.__name__
                )
            )
        return [column.bind_value(value) for column, value in zip(key_columns, key_value)]

    if len(key_columns) == 1 and not _is_key_holder(key_value, metadata):
        return [key_columns[0].bind_value(key_value)]

    # Key holder object (embeddable or id class instance)
    try:
        return [column.bind_value(getattr(key_value, column.field_name)) for column in key_columns]
    except AttributeError as exc:
        raise ArgumentError(
            ErrorMessages.KEY_SHAPE_MISMATCH.format(
                value=key_value, expected=len(key_columns), model_name=metadata.model.__name__
            )
        ) from exc


def _is_key_holder(value: Any, metadata: EntityMetadata) -> bool:
    pk = metadata.primary_key
    holder = pk.holder_type if pk.holder_type is not None else pk.id_class
    return holder is not None and isinstance(value, holder)


def get_field_value(record: Any, path: str) -> Any:
    """Read a field, following dotted paths through embedded holders."""
    target = record
    for part in path.split(ModelMetadataConstants.FIELD_PATH_SEPARATOR):
        if target is None:
            return None
        _check_field(type(target), part)
        target = getattr(target, part)
    return target


def set_field_value(record: Any, path: str, value: Any) -> None:
    """
    Write a field, following dotted paths and creating missing embedded holders.

    :raises MetadataResolutionError: If a path segment names no field
    """
    parts = path.split(ModelMetadataConstants.FIELD_PATH_SEPARATOR)
    target = record
    for part in parts[:-1]:
        field_info = _check_field(type(target), part)
        nested = getattr(target, part)
        if nested is None:
            nested_type = _unwrap_optional(field_info.annotation)
            setattr(target, part, nested_type.model_construct())
            nested = getattr(target, part)
        target = nested
    _check_field(type(target), parts[-1])
    setattr(target, parts[-1], value)


def _check_field(model: type, name: str) -> FieldInfo:
    model_fields = getattr(model, "model_fields", {})
    if name not in model_fields:
        raise MetadataResolutionError(
            ErrorMessages.FIELD_NOT_FOUND.format(field_name=name, model_name=model.__name__)
        )
    return model_fields[name]
