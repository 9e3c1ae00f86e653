"""Pure helpers an apply step uses to turn a resolved preview into durable records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final
from uuid import UUID

from kinsync.domain.errors import InvalidResolutionError
from kinsync.domain.model import (
    Gender,
    ParentRole,
    Person,
    Relationship,
    Resolution,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from kinsync.domain.model import DuplicateMatch, Family, Individual, InterchangeId, UserId
    from kinsync.domain.preview import ResolutionDecision

_SEX_TO_GENDER: Final[dict[str, Gender]] = {
    "M": Gender.MALE,
    "F": Gender.FEMALE,
    "U": Gender.UNSPECIFIED,
}


def map_sex_to_gender(sex: str | None) -> Gender:
    if not sex:
        return Gender.UNSPECIFIED
    return _SEX_TO_GENDER.get(sex.strip().upper(), Gender.OTHER)


def person_from_individual(individual: Individual, *, owner_id: UserId) -> Person:
    return Person(
        owner_id=owner_id,
        first_name=individual.first_name or "",
        last_name=individual.last_name or "",
        gender=map_sex_to_gender(individual.sex),
        birth_date=individual.birth_date,
        death_date=individual.death_date,
    )


@dataclass(frozen=True, slots=True)
class MergeCandidate:
    individual: Individual
    existing_person_id: UUID


@dataclass(slots=True)
class ImportPlan:
    to_import: list[Individual] = field(default_factory=list["Individual"])
    to_merge: list[MergeCandidate] = field(default_factory=list[MergeCandidate])
    id_mapping: dict[InterchangeId, UUID] = field(default_factory=dict["InterchangeId", UUID])


def apply_resolutions(
    individuals: Iterable[Individual],
    decisions: Iterable[ResolutionDecision],
    matches: Iterable[DuplicateMatch] = (),
) -> ImportPlan:
    """Partition individuals by the operator's decisions.

    ``merge`` and ``skip`` map the individual to the existing person so that
    relationships still attach to it; an individual without a decision is
    imported as new. When a decision names no existing person, the upstream
    duplicate match supplies it.
    """

    by_individual = {decision.individual_id: decision for decision in decisions}
    matched = {match.source_individual_id: match.existing_person_id for match in matches}
    plan = ImportPlan()

    for individual in individuals:
        decision = by_individual.get(individual.id)
        if decision is None or decision.resolution is Resolution.IMPORT_AS_NEW:
            plan.to_import.append(individual)
            continue

        existing_id = _existing_person_id(
            individual.id, decision.existing_person_id or matched.get(individual.id)
        )
        plan.id_mapping[individual.id] = existing_id
        if decision.resolution is Resolution.MERGE:
            plan.to_merge.append(
                MergeCandidate(individual=individual, existing_person_id=existing_id)
            )

    return plan


def build_relationships(
    families: Iterable[Family],
    id_mapping: Mapping[InterchangeId, UUID],
    *,
    owner_id: UserId | None = None,
) -> list[Relationship]:
    """Durable edges for every family whose members made it into ``id_mapping``."""

    relationships: list[Relationship] = []
    for family in families:
        husband_id = id_mapping.get(family.husband) if family.husband else None
        wife_id = id_mapping.get(family.wife) if family.wife else None

        if husband_id and wife_id and husband_id != wife_id:
            relationships.append(Relationship.spouses(husband_id, wife_id, owner_id=owner_id))

        for child in family.children:
            child_id = id_mapping.get(child)
            if child_id is None:
                continue
            if husband_id and husband_id != child_id:
                relationships.append(
                    Relationship.parent(husband_id, child_id, ParentRole.FATHER, owner_id=owner_id)
                )
            if wife_id and wife_id != child_id:
                relationships.append(
                    Relationship.parent(wife_id, child_id, ParentRole.MOTHER, owner_id=owner_id)
                )

    return relationships


def _existing_person_id(individual_id: InterchangeId, raw: str | None) -> UUID:
    if not raw:
        raise InvalidResolutionError(f"No existing person given for {individual_id}")
    try:
        return UUID(raw)
    except ValueError as exc:
        raise InvalidResolutionError(
            f"Existing person id for {individual_id} is not a valid id: {raw}"
        ) from exc
