"""Atomic pairwise person merge.

The source person's edges are re-pointed onto the target, the target takes
the best field values of both, and the source person is removed. Everything
happens in one unit of work: either all of it is committed or none of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from kinsync.domain.errors import MergeBlockedError
from kinsync.domain.model import MergeRecord

from .preview import preview_merge

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Sequence
    from uuid import UUID

    from kinsync.domain.model import Person, Relationship, UserId
    from kinsync.domain.ports import PeopleUnitOfWork

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeRequest:
    source_id: UUID
    target_id: UUID
    user_id: UserId
    allow_gender_mismatch: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeResult:
    source_id: UUID
    target_id: UUID
    relationships_transferred: int
    relationships_deduplicated: int
    removed_source_relationships: int
    merged: dict[str, object] = field(default_factory=dict[str, object])
    merge_record_id: UUID | None = None


@dataclass(slots=True)
class _TransferPlan:
    to_add: list[Relationship] = field(default_factory=list["Relationship"])
    deduplicated: int = 0


class PersonMergeExecutor:
    """Merge one persisted person into another.

    ``uow_factory`` returns a fresh, not yet entered unit of work per call.
    """

    def __init__(self, uow_factory: Callable[[], PeopleUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, request: MergeRequest) -> MergeResult:
        """Run the merge or raise.

        :class:`MergeBlockedError` is raised before anything is written when the
        safety checks fail or both persons have different parents of one role.
        Any other failure rolls the unit of work back and propagates.
        """

        with self._uow_factory() as uow:
            preview = preview_merge(
                uow,
                request.source_id,
                request.target_id,
                request.user_id,
                allow_gender_mismatch=request.allow_gender_mismatch,
            )
            reasons = preview.blocking_reasons
            if reasons:
                log.warning(
                    "Merge %s -> %s blocked: %s", request.source_id, request.target_id, reasons
                )
                raise MergeBlockedError(reasons)

            source, target = preview.source, preview.target
            plan = _plan_transfer(
                source.id,
                target.id,
                preview.relationships_to_transfer,
                preview.existing_relationships,
            )

            relationships = uow.repositories.relationships
            for relationship in preview.relationships_to_transfer:
                relationships.delete(relationship)
            for relationship in plan.to_add:
                relationships.add(relationship)

            _apply_values(target, preview.merged)
            uow.repositories.people.delete(source)

            record = MergeRecord(
                source_id=source.id,
                target_id=target.id,
                owner_id=target.owner_id,
                relationships_transferred=len(plan.to_add),
                relationships_deduplicated=plan.deduplicated,
            )
            uow.repositories.merges.add(record)
            uow.commit()

        log.info(
            "Merged person %s into %s: %d transferred, %d deduplicated",
            source.id,
            target.id,
            len(plan.to_add),
            plan.deduplicated,
        )
        return MergeResult(
            source_id=source.id,
            target_id=target.id,
            relationships_transferred=len(plan.to_add),
            relationships_deduplicated=plan.deduplicated,
            removed_source_relationships=len(preview.relationships_to_transfer),
            merged=dict(preview.merged),
            merge_record_id=record.id,
        )


def _plan_transfer(
    source_id: UUID,
    target_id: UUID,
    source_relationships: Sequence[Relationship],
    target_relationships: Sequence[Relationship],
) -> _TransferPlan:
    """Re-point source edges onto the target, skipping facts the target already has.

    Identity keys treat a spouse edge as an unordered pair, so both legacy
    directed copies of one marriage collapse onto a single new edge. Edges that
    would join the target to itself are dropped.
    """

    plan = _TransferPlan()
    seen: set[Hashable] = {relationship.identity_key() for relationship in target_relationships}

    for relationship in source_relationships:
        moved = relationship.repointed(source_id, target_id)
        if moved.person1_id == moved.person2_id:
            plan.deduplicated += 1
            continue
        key = moved.identity_key()
        if key in seen:
            plan.deduplicated += 1
            continue
        seen.add(key)
        plan.to_add.append(moved)

    return plan


def _apply_values(target: Person, merged: dict[str, object]) -> None:
    for name, value in merged.items():
        setattr(target, name, value)
