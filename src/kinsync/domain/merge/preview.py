"""Read-only merge preview: safety checks, parent conflicts and merged field values."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from kinsync.domain.errors import PersonNotFoundError
from kinsync.domain.model import PERSON_FIELDS, Gender, ParentRole

from .values import select_best_value

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from kinsync.domain.model import Person, Relationship, UserId
    from kinsync.domain.ports import PeopleUnitOfWork

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FieldComparison:
    source: object
    target: object
    merged: object


@dataclass(frozen=True, slots=True, kw_only=True)
class MergePreview:
    source: Person
    target: Person
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    conflict_fields: tuple[ParentRole, ...] = ()
    merged: dict[str, object] = field(default_factory=dict[str, object])
    comparison: dict[str, FieldComparison] = field(default_factory=dict[str, FieldComparison])
    relationships_to_transfer: tuple[Relationship, ...] = ()
    existing_relationships: tuple[Relationship, ...] = ()

    @property
    def can_merge(self) -> bool:
        return not self.errors

    @property
    def blocking_reasons(self) -> tuple[str, ...]:
        """Everything that stops execution: safety errors plus parent conflicts."""
        return self.errors + self.warnings if self.conflict_fields else self.errors


def validate_merge(
    source: Person,
    target: Person,
    user_id: UserId,
    *,
    allow_gender_mismatch: bool = False,
) -> list[str]:
    errors: list[str] = []

    if source.id == target.id:
        errors.append("Cannot merge a person into itself")

    if source.owner_id != target.owner_id:
        errors.append("Cannot merge records across different users")
    if source.owner_id != user_id:
        errors.append("Source person does not belong to current user")
    if target.owner_id != user_id:
        errors.append("Target person does not belong to current user")

    if not allow_gender_mismatch and _genders_conflict(source.gender, target.gender):
        errors.append(f"Gender mismatch: Cannot merge {source.gender} into {target.gender}")

    if source.is_protected:
        errors.append("Cannot merge your profile person into another person")
    if target.is_protected:
        errors.append("Cannot merge into your profile person")

    return errors


def detect_relationship_conflicts(
    source_id: UUID,
    target_id: UUID,
    source_relationships: Iterable[Relationship],
    target_relationships: Iterable[Relationship],
) -> list[ParentRole]:
    """Parent roles for which source and target have different parents."""

    source_parents = _parents_by_role(source_id, source_relationships)
    target_parents = _parents_by_role(target_id, target_relationships)
    return [
        role
        for role in (ParentRole.MOTHER, ParentRole.FATHER)
        if role in source_parents
        and role in target_parents
        and source_parents[role] != target_parents[role]
    ]


def build_merge_preview(
    source: Person,
    target: Person,
    user_id: UserId,
    source_relationships: Sequence[Relationship],
    target_relationships: Sequence[Relationship],
    *,
    allow_gender_mismatch: bool = False,
) -> MergePreview:
    errors = validate_merge(source, target, user_id, allow_gender_mismatch=allow_gender_mismatch)
    conflicts = detect_relationship_conflicts(
        source.id, target.id, source_relationships, target_relationships
    )
    warnings = [
        f"Both people have different {role}s - merge would leave two {role}s"
        for role in conflicts
    ]

    source_values = source.field_values()
    target_values = target.field_values()
    merged = {
        name: select_best_value(source_values[name], target_values[name]) for name in PERSON_FIELDS
    }
    comparison = {
        name: FieldComparison(
            source=source_values[name], target=target_values[name], merged=merged[name]
        )
        for name in PERSON_FIELDS
    }

    return MergePreview(
        source=source,
        target=target,
        errors=tuple(errors),
        warnings=tuple(warnings),
        conflict_fields=tuple(conflicts),
        merged=merged,
        comparison=comparison,
        relationships_to_transfer=tuple(source_relationships),
        existing_relationships=tuple(target_relationships),
    )


def preview_merge(
    uow: PeopleUnitOfWork,
    source_id: UUID,
    target_id: UUID,
    user_id: UserId,
    *,
    allow_gender_mismatch: bool = False,
) -> MergePreview:
    """Load both persons and their edges through ``uow`` and build the preview.

    Reads only; the caller owns the unit-of-work scope.
    """

    repositories = uow.repositories
    source = repositories.people.get(source_id)
    if source is None:
        raise PersonNotFoundError("source", source_id)
    target = repositories.people.get(target_id)
    if target is None:
        raise PersonNotFoundError("target", target_id)

    preview = build_merge_preview(
        source,
        target,
        user_id,
        repositories.relationships.for_person(source_id),
        repositories.relationships.for_person(target_id),
        allow_gender_mismatch=allow_gender_mismatch,
    )
    log.debug(
        "Merge preview %s -> %s: %d errors, %d conflicts",
        source_id,
        target_id,
        len(preview.errors),
        len(preview.conflict_fields),
    )
    return preview


def _genders_conflict(source: Gender | None, target: Gender | None) -> bool:
    if source is None or target is None:
        return False
    if Gender.UNSPECIFIED in (source, target):
        return False
    return source != target


def _parents_by_role(
    child_id: UUID, relationships: Iterable[Relationship]
) -> dict[ParentRole, UUID]:
    parents: dict[ParentRole, UUID] = {}
    for relationship in relationships:
        for role in (ParentRole.MOTHER, ParentRole.FATHER):
            if role not in parents and relationship.is_parent_edge_of(child_id, role):
                parents[role] = relationship.person1_id
    return parents
