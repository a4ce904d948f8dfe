# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Sample record types shared by the test modules.
"""

from __future__ import annotations

from typing import ClassVar, List, Optional

from batchalchemy import (
    RelationshipKind,
    SqlBaseModel,
    SqlEmbeddable,
    embedded_id,
    relationship,
    sql_field,
    sql_table,
)


# ============================================================================
# KEY SHAPES
# ============================================================================

class SampleEmbeddedId(SqlEmbeddable):
    """Composite key: a sequence-fed id plus a text discriminator."""
    id: Optional[int] = sql_field(None, sequence_name="sample_seq")
    entity: Optional[str] = sql_field(None, column="entity2")


@sql_table(name="sample_entity", sequence_name="sample_seq")
class SampleEntity(SqlBaseModel):
    """Embedded-id record with an association and a class constant."""
    key: Optional[SampleEmbeddedId] = embedded_id()
    name: Optional[str] = None
    description: Optional[str] = sql_field(None, column="desc")
    children: List[str] = relationship(RelationshipKind.ONE_TO_MANY, default_factory=list)

    VERSION: ClassVar[int] = 1


@sql_table(name="sample_id_class_entity", id_class=SampleEmbeddedId)
class SampleIdClassEntity(SqlBaseModel):
    id: Optional[int] = sql_field(None, primary_key=True, sequence_name="sample_seq")
    entity: Optional[str] = sql_field(None, primary_key=True, column="entity2")
    name: Optional[str] = None
    description: Optional[str] = sql_field(None, column="desc")


@sql_table(name="sample_single_id_entity")
class SampleSingleIdEntity(SqlBaseModel):
    id: Optional[int] = sql_field(None, primary_key=True, generated=True)
    firstName: Optional[str] = None
    description: Optional[str] = sql_field(None, column="desc")
    cache_note: Optional[str] = sql_field(None, transient=True)


# ============================================================================
# INHERITANCE
# ============================================================================

class SamplePojoParent(SqlBaseModel):
    id: Optional[int] = sql_field(None, primary_key=True)
    createdBy: Optional[str] = None


@sql_table(sequence_name="pojo_seq")
class SamplePojo(SamplePojoParent):
    description: Optional[str] = sql_field(None, column="desc")


@sql_table(name="child_pojo")
class ChildPojo(SamplePojo):
    extra: Optional[int] = None


# ============================================================================
# SQLITE-BACKED MODELS
# ============================================================================

@sql_table(name="person", sequence_name="person_seq")
class Person(SqlBaseModel):
    id: Optional[int] = sql_field(None, primary_key=True)
    firstName: Optional[str] = None
    lastName: Optional[str] = sql_field(None, column="surname")
    age: Optional[int] = None


class MembershipKey(SqlEmbeddable):
    club_id: Optional[int] = None
    person_id: Optional[int] = None


@sql_table(name="membership")
class Membership(SqlBaseModel):
    key: Optional[MembershipKey] = embedded_id()
    role: Optional[str] = None


def make_people(count: int, start: int = 1) -> List[Person]:
    return [
        Person(id=start + i, firstName=f"first{start + i}", lastName=f"last{start + i}", age=20 + i)
        for i in range(count)
    ]


def make_single_ids(count: int) -> List[SampleSingleIdEntity]:
    return [SampleSingleIdEntity(id=i + 1, firstName=f"n{i + 1}", description=f"d{i + 1}") for i in range(count)]
