"""SQLAlchemy mapping metadata for the person graph."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from kinsync.domain.model import (
    Gender,
    MergeRecord,
    ParentRole,
    Person,
    Relationship,
    RelationshipType,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


def _value_enum(enum_cls: type[StrEnum]) -> Enum:
    """Non-native enum column storing member values rather than names."""
    return Enum(enum_cls, native_enum=False, values_callable=_enum_values)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Core tables -----------------------------------------------------------------

person_table = Table(
    "person",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("owner_id", String, nullable=False, index=True),
    Column("first_name", String, nullable=False),
    Column("last_name", String, nullable=False, default=""),
    Column("birth_date", String(10), nullable=True),
    Column("death_date", String(10), nullable=True),
    Column("gender", _value_enum(Gender), nullable=True),
    Column("photo_url", String, nullable=True),
    Column("birth_surname", String, nullable=True),
    Column("nickname", String, nullable=True),
    Column("is_protected", Boolean, nullable=False, default=False),
    Column("created_at", UTCDateTime(), nullable=True),
)

relationship_table = Table(
    "relationship",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("owner_id", String, nullable=True),
    Column(
        "person1_id",
        UUIDColumnType,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "person2_id",
        UUIDColumnType,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("type", _value_enum(RelationshipType), nullable=False),
    Column("parent_role", _value_enum(ParentRole), nullable=True),
)

# A child has at most one parent per role.
Index(
    "uq_relationship_parent_role",
    relationship_table.c.person2_id,
    relationship_table.c.parent_role,
    unique=True,
    sqlite_where=relationship_table.c.type == RelationshipType.PARENT_OF.value,
    postgresql_where=relationship_table.c.type == RelationshipType.PARENT_OF.value,
)

# Spouse edges are stored once, ids in canonical order.
Index(
    "uq_relationship_spouse_pair",
    relationship_table.c.person1_id,
    relationship_table.c.person2_id,
    unique=True,
    sqlite_where=relationship_table.c.type == RelationshipType.SPOUSE.value,
    postgresql_where=relationship_table.c.type == RelationshipType.SPOUSE.value,
)

# Audit ------------------------------------------------------------------------

merge_record_table = Table(
    "merge_record",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("source_id", UUIDColumnType, nullable=False),
    Column("target_id", UUIDColumnType, nullable=False, index=True),
    Column("owner_id", String, nullable=False),
    Column("relationships_transferred", Integer, nullable=False, default=0),
    Column("relationships_deduplicated", Integer, nullable=False, default=0),
    Column("created_at", UTCDateTime(), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Person, person_table)
    mapper_registry.map_imperatively(Relationship, relationship_table)
    mapper_registry.map_imperatively(MergeRecord, merge_record_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
