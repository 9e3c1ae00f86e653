"""Durable person graph: people, their relationship edges, and merge audit rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .entity import Entity
from .enums import Gender, ParentRole, RelationshipType

if TYPE_CHECKING:
    from collections.abc import Hashable
    from uuid import UUID

    from .primitives import UserId


PERSON_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "birth_date",
    "death_date",
    "gender",
    "photo_url",
    "birth_surname",
    "nickname",
)


@dataclass(eq=False, kw_only=True)
class Person(Entity):
    """A persisted person owned by one user.

    ``is_protected`` marks records anchored by the system (e.g. a user's own
    profile person); they never take part in a merge on either side.
    """

    owner_id: UserId
    first_name: str
    last_name: str = ""
    birth_date: str | None = None
    death_date: str | None = None
    gender: Gender | None = None
    photo_url: str | None = None
    birth_surname: str | None = None
    nickname: str | None = None
    is_protected: bool = False
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def field_values(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in PERSON_FIELDS}


@dataclass(eq=False, kw_only=True)
class Relationship(Entity):
    """One edge of the person graph.

    ``parent_of`` edges point from parent (``person1_id``) to child
    (``person2_id``) and carry a role. Spouse edges are undirected and stored
    once with the ids in canonical order.
    """

    person1_id: UUID
    person2_id: UUID
    type: RelationshipType
    parent_role: ParentRole | None = None
    owner_id: UserId | None = None

    def __post_init__(self) -> None:
        if self.type is RelationshipType.PARENT_OF and self.parent_role is None:
            raise ValueError("parent_of relationship requires a parent_role")
        if self.type is RelationshipType.SPOUSE and self.parent_role is not None:
            raise ValueError("spouse relationship cannot carry a parent_role")

    @classmethod
    def parent(
        cls,
        parent_id: UUID,
        child_id: UUID,
        role: ParentRole,
        *,
        owner_id: UserId | None = None,
    ) -> Relationship:
        return cls(
            person1_id=parent_id,
            person2_id=child_id,
            type=RelationshipType.PARENT_OF,
            parent_role=role,
            owner_id=owner_id,
        )

    @classmethod
    def spouses(cls, first: UUID, second: UUID, *, owner_id: UserId | None = None) -> Relationship:
        low, high = sorted((first, second), key=str)
        return cls(
            person1_id=low,
            person2_id=high,
            type=RelationshipType.SPOUSE,
            owner_id=owner_id,
        )

    @property
    def is_spouse(self) -> bool:
        return self.type is RelationshipType.SPOUSE

    def involves(self, person_id: UUID) -> bool:
        return person_id in (self.person1_id, self.person2_id)

    def is_parent_edge_of(self, child_id: UUID, role: ParentRole) -> bool:
        return (
            self.type is RelationshipType.PARENT_OF
            and self.person2_id == child_id
            and self.parent_role is role
        )

    def identity_key(self) -> Hashable:
        """Key under which two edges describe the same fact."""
        if self.is_spouse:
            return (self.type, frozenset((self.person1_id, self.person2_id)))
        return (self.type, self.person1_id, self.person2_id, self.parent_role)

    def repointed(self, source_id: UUID, target_id: UUID) -> Relationship:
        """Return a fresh edge with every ``source_id`` endpoint replaced by ``target_id``."""
        first = target_id if self.person1_id == source_id else self.person1_id
        second = target_id if self.person2_id == source_id else self.person2_id
        if self.is_spouse:
            return Relationship.spouses(first, second, owner_id=self.owner_id)
        return Relationship(
            person1_id=first,
            person2_id=second,
            type=self.type,
            parent_role=self.parent_role,
            owner_id=self.owner_id,
        )


@dataclass(eq=False, kw_only=True)
class MergeRecord(Entity):
    """Audit record written alongside a completed person merge."""

    source_id: UUID
    target_id: UUID
    owner_id: UserId
    relationships_transferred: int = 0
    relationships_deduplicated: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
