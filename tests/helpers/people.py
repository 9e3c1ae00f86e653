"""Person graph factories and an in-memory unit of work for merge tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, Self

from kinsync.domain.model import Gender, MergeRecord, ParentRole, Person, Relationship
from kinsync.domain.ports.unit_of_work import PeopleRepositories

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType
    from uuid import UUID

    from kinsync.domain.ports import PeopleUnitOfWork

OWNER = "user-1"


def make_person(
    first_name: str = "Ada",
    last_name: str = "Lovelace",
    *,
    owner_id: str = OWNER,
    gender: Gender | None = Gender.FEMALE,
    birth_date: str | None = None,
    death_date: str | None = None,
    nickname: str | None = None,
    is_protected: bool = False,
) -> Person:
    return Person(
        owner_id=owner_id,
        first_name=first_name,
        last_name=last_name,
        gender=gender,
        birth_date=birth_date,
        death_date=death_date,
        nickname=nickname,
        is_protected=is_protected,
    )


def father_of(parent: Person, child: Person) -> Relationship:
    return Relationship.parent(parent.id, child.id, ParentRole.FATHER, owner_id=parent.owner_id)


def mother_of(parent: Person, child: Person) -> Relationship:
    return Relationship.parent(parent.id, child.id, ParentRole.MOTHER, owner_id=parent.owner_id)


def married(first: Person, second: Person) -> Relationship:
    return Relationship.spouses(first.id, second.id, owner_id=first.owner_id)


class FakePersonRepository:
    def __init__(self) -> None:
        self.people: dict[UUID, Person] = {}

    def add(self, entity: Person) -> None:
        self.people[entity.id] = entity

    def get(self, person_id: UUID) -> Person | None:
        return self.people.get(person_id)

    def delete(self, person: Person) -> None:
        self.people.pop(person.id, None)


class FakeRelationshipRepository:
    def __init__(self) -> None:
        self.relationships: list[Relationship] = []

    def add(self, entity: Relationship) -> None:
        self.relationships.append(entity)

    def for_person(self, person_id: UUID) -> list[Relationship]:
        return [edge for edge in self.relationships if edge.involves(person_id)]

    def delete(self, relationship: Relationship) -> None:
        self.relationships = [edge for edge in self.relationships if edge.id != relationship.id]


class FakeMergeRecordRepository:
    def __init__(self) -> None:
        self.records: list[MergeRecord] = []

    def add(self, entity: MergeRecord) -> None:
        self.records.append(entity)

    def for_target(self, target_id: UUID) -> list[MergeRecord]:
        return [record for record in self.records if record.target_id == target_id]


class FakePeopleUnitOfWork:
    """Unit of work over in-memory repositories; tracks commit and rollback calls."""

    def __init__(self) -> None:
        self.repositories = PeopleRepositories(
            people=FakePersonRepository(),
            relationships=FakeRelationshipRepository(),
            merges=FakeMergeRecordRepository(),
        )
        self.committed = False
        self.rolled_back = False

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True


def persist(
    uow_factory: Callable[[], PeopleUnitOfWork],
    *entities: Person | Relationship,
) -> None:
    """Store ``entities`` through a fresh SQLAlchemy unit of work and commit."""

    with uow_factory() as uow:
        for entity in entities:
            if isinstance(entity, Person):
                uow.repositories.people.add(entity)
            else:
                uow.repositories.relationships.add(entity)
        uow.commit()
