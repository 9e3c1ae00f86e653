"""Ports for persisting the person graph."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from kinsync.domain.model import MergeRecord, Person, Relationship

if TYPE_CHECKING:
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class PersonRepository(Repository[Person], Protocol):
    """Persistence contract for people."""

    def get(self, person_id: UUID) -> Person | None: ...

    def delete(self, person: Person) -> None: ...


@runtime_checkable
class RelationshipRepository(Repository[Relationship], Protocol):
    """Persistence contract for relationship edges."""

    def for_person(self, person_id: UUID) -> list[Relationship]: ...

    def delete(self, relationship: Relationship) -> None: ...


@runtime_checkable
class MergeRecordRepository(Repository[MergeRecord], Protocol):
    """Persistence contract for merge audit rows."""

    def for_target(self, target_id: UUID) -> list[MergeRecord]: ...
