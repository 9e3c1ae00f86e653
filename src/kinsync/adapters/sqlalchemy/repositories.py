"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import or_, select

from kinsync.adapters.sqlalchemy.mappings import merge_record_table, relationship_table
from kinsync.domain.model import MergeRecord, Person, Relationship

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.orm import Session


class SqlAlchemyPersonRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Person) -> None:
        self.session.add(entity)

    def get(self, person_id: UUID) -> Person | None:
        return self.session.get(Person, person_id)

    def delete(self, person: Person) -> None:
        self.session.delete(person)


class SqlAlchemyRelationshipRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Relationship) -> None:
        self.session.add(entity)

    def for_person(self, person_id: UUID) -> list[Relationship]:
        stmt = (
            select(Relationship)
            .where(
                or_(
                    relationship_table.c.person1_id == person_id,
                    relationship_table.c.person2_id == person_id,
                )
            )
            .order_by(relationship_table.c.type, relationship_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def delete(self, relationship: Relationship) -> None:
        # Flushed right away so re-pointed replacements never meet the old row
        # in the partial unique indexes.
        self.session.delete(relationship)
        self.session.flush()


class SqlAlchemyMergeRecordRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: MergeRecord) -> None:
        self.session.add(entity)

    def for_target(self, target_id: UUID) -> list[MergeRecord]:
        stmt = (
            select(MergeRecord)
            .where(merge_record_table.c.target_id == target_id)
            .order_by(merge_record_table.c.created_at)
        )
        return list(self.session.execute(stmt).scalars())
