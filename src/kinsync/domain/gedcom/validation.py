"""Referential checks over a parsed interchange forest.

Nothing here mutates its input. Orphan cleanup returns new family objects and
leaves the parsed ones as they were.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING

from kinsync.domain.diagnostics import import_warning

if TYPE_CHECKING:
    from collections.abc import Iterable

    from kinsync.domain.model import Family, ImportIssue, Individual, ParsingResult

DATE_FORMAT_FIX = "Use format YYYY-MM-DD or standard GEDCOM date format (DD MMM YYYY)"


class RelationshipIssueKind(StrEnum):
    CHILD_FAMILY_MISMATCH = "child-family-mismatch"
    SPOUSE_FAMILY_MISMATCH = "spouse-family-mismatch"


@dataclass(frozen=True, slots=True)
class RelationshipIssue:
    kind: RelationshipIssueKind
    description: str
    affected_ids: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class OrphanValidation:
    has_orphans: bool
    warnings: tuple[ImportIssue, ...] = ()
    cleaned_families: tuple[Family, ...] = ()


def validate_relationship_consistency(result: ParsingResult) -> list[RelationshipIssue]:
    """Report memberships an individual declares but the referenced family does not confirm.

    References to families that do not exist are left to the orphan check.
    """

    families = {family.id: family for family in result.families}
    issues: list[RelationshipIssue] = []

    for individual in result.individuals:
        family_id = individual.child_of_family
        family = families.get(family_id) if family_id else None
        if family is not None and individual.id not in family.children:
            issues.append(
                RelationshipIssue(
                    kind=RelationshipIssueKind.CHILD_FAMILY_MISMATCH,
                    description=(
                        f"Individual {individual.id} ({individual.name}) references family "
                        f"{family.id} but is not listed as a child"
                    ),
                    affected_ids=(individual.id, family.id),
                )
            )

    for individual in result.individuals:
        for family_id in individual.spouse_families:
            family = families.get(family_id)
            if family is not None and individual.id not in (family.husband, family.wife):
                issues.append(
                    RelationshipIssue(
                        kind=RelationshipIssueKind.SPOUSE_FAMILY_MISMATCH,
                        description=(
                            f"Individual {individual.id} ({individual.name}) references family "
                            f"{family_id} as spouse but is not listed as husband or wife"
                        ),
                        affected_ids=(individual.id, family_id),
                    )
                )

    return issues


def validate_orphaned_references(result: ParsingResult) -> OrphanValidation:
    """Drop family pointers to unknown individuals, one warning per orphaned field."""

    known = {individual.id for individual in result.individuals}
    warnings: list[ImportIssue] = []
    cleaned: list[Family] = []

    for family in result.families:
        husband, wife = family.husband, family.wife

        if husband and husband not in known:
            warnings.append(
                import_warning(
                    message=f"Orphaned husband reference: Individual {husband} not found",
                    record_id=family.id,
                    field="husband",
                    suggested_fix="Remove invalid husband reference or add missing individual",
                )
            )
            husband = None

        if wife and wife not in known:
            warnings.append(
                import_warning(
                    message=f"Orphaned wife reference: Individual {wife} not found",
                    record_id=family.id,
                    field="wife",
                    suggested_fix="Remove invalid wife reference or add missing individual",
                )
            )
            wife = None

        children = tuple(child for child in family.children if child in known)
        orphaned = [child for child in family.children if child not in known]
        if orphaned:
            warnings.append(
                import_warning(
                    message=(
                        f"Orphaned child reference(s): {', '.join(orphaned)} "
                        f"not found in family {family.id}"
                    ),
                    record_id=family.id,
                    field="children",
                    suggested_fix="Remove invalid child references or add missing individuals",
                )
            )

        cleaned.append(replace(family, husband=husband, wife=wife, children=children))

    return OrphanValidation(
        has_orphans=bool(warnings),
        warnings=tuple(warnings),
        cleaned_families=tuple(cleaned),
    )


def collect_parsing_errors(individuals: Iterable[Individual]) -> list[ImportIssue]:
    """Turn per-field date errors into warnings naming the individual."""

    issues: list[ImportIssue] = []
    for individual in individuals:
        name = f"{individual.first_name or ''} {individual.last_name or ''}".strip() or None
        issues.extend(
            import_warning(
                message=f'Could not parse date "{date_error.original}" - {date_error.error}',
                record_id=individual.id,
                individual_name=name,
                field=date_error.field,
                suggested_fix=DATE_FORMAT_FIX,
            )
            for date_error in individual.date_errors
        )
    return issues
