"""Per-user reconciliation workspace over one parsed upload.

Nothing here writes to the durable store. The workspace holds the parsed
individuals, their duplicate candidates and the operator's resolution
decisions until an apply step consumes them.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from kinsync.domain.errors import InvalidResolutionError, PreviewNotFoundError
from kinsync.domain.model import ParentRole, PreviewStatus, Resolution, SortOrder

from .session import (
    AnnotatedIndividual,
    IndividualsPage,
    IndividualsQuery,
    Pagination,
    ParentLink,
    PersonView,
    PreviewKey,
    PreviewSession,
    RelativeView,
    ResolutionDecision,
    SpouseLink,
    TreeView,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from kinsync.domain.model import (
        DuplicateMatch,
        Family,
        InterchangeId,
        ParsingResult,
        UserId,
    )
    from kinsync.domain.ports import PreviewRepository

    from .session import PreviewSummary

log = getLogger(__name__)

_SORT_ALIASES: dict[str, str] = {
    "birthDate": "birth_date",
    "deathDate": "death_date",
    "firstName": "first_name",
    "lastName": "last_name",
    "gedcomId": "id",
}

type DecisionInput = ResolutionDecision | Mapping[str, object]


class ReconciliationWorkspace:
    def __init__(self, repository: PreviewRepository) -> None:
        self._repository = repository

    def store(
        self,
        upload_id: str,
        user_id: UserId,
        parsed: ParsingResult,
        duplicate_matches: Iterable[DuplicateMatch] = (),
        *,
        families: Iterable[Family] | None = None,
    ) -> PreviewSession:
        """Annotate parsed individuals and start a fresh session (prior decisions are dropped).

        ``families`` overrides the parsed families, e.g. with orphan-cleaned copies.
        """

        individuals = parsed.individuals
        parsed_families = parsed.families if families is None else tuple(families)

        matches = tuple(duplicate_matches)
        lookup = {match.source_individual_id: match for match in matches}
        annotated = tuple(
            AnnotatedIndividual(
                individual=individual,
                status=PreviewStatus.DUPLICATE if individual.id in lookup else PreviewStatus.NEW,
                match=lookup.get(individual.id),
            )
            for individual in individuals
        )

        session = PreviewSession(
            key=PreviewKey(upload_id=upload_id, user_id=user_id),
            individuals=annotated,
            families=parsed_families,
            matches=matches,
        )
        self._repository.save(session)
        summary = session.summary()
        log.info(
            "Stored preview %s for user %s: %d individuals (%d duplicates)",
            upload_id,
            user_id,
            summary.total_individuals,
            summary.duplicate_count,
        )
        return session

    def get_individuals(
        self,
        upload_id: str,
        user_id: UserId,
        query: IndividualsQuery | None = None,
    ) -> IndividualsPage:
        session = self._require(upload_id, user_id)
        query = query or IndividualsQuery()

        rows = list(session.individuals)
        if query.search:
            rows = [row for row in rows if row.matches_search(query.search)]

        attribute = _SORT_ALIASES.get(query.sort_by, query.sort_by)
        rows.sort(
            key=lambda row: _sort_value(row, attribute),
            reverse=query.sort_order is SortOrder.DESC,
        )

        pagination = Pagination.of(page=query.page, limit=query.limit, total=len(rows))
        window = rows[pagination.offset : pagination.offset + query.limit]
        return IndividualsPage(
            individuals=tuple(window),
            pagination=pagination,
            summary=session.summary(),
        )

    def get_person(
        self, upload_id: str, user_id: UserId, individual_id: InterchangeId
    ) -> PersonView | None:
        """Return the individual with parents, spouses and children, or ``None`` if unknown."""

        session = self._require(upload_id, user_id)
        person = session.find(individual_id)
        if person is None:
            return None

        parents: list[RelativeView] = []
        parent_family = session.family(person.individual.child_of_family)
        if parent_family is not None:
            for member_id, role in (
                (parent_family.husband, ParentRole.FATHER),
                (parent_family.wife, ParentRole.MOTHER),
            ):
                member = session.find(member_id) if member_id else None
                if member is not None:
                    parents.append(RelativeView.of(member, role=role))

        spouses: list[RelativeView] = []
        children: list[RelativeView] = []
        for family_id in person.individual.spouse_families:
            family = session.family(family_id)
            if family is None:
                continue
            spouse_id = family.wife if family.husband == individual_id else family.husband
            spouse = session.find(spouse_id) if spouse_id else None
            if spouse is not None:
                spouses.append(RelativeView.of(spouse))
            children.extend(
                RelativeView.of(child)
                for child_id in family.children
                if (child := session.find(child_id)) is not None
            )

        return PersonView(
            person=person,
            parents=tuple(parents),
            spouses=tuple(spouses),
            children=tuple(children),
        )

    def get_tree(self, upload_id: str, user_id: UserId) -> TreeView:
        session = self._require(upload_id, user_id)
        spouses: list[SpouseLink] = []
        parents: list[ParentLink] = []

        for family in session.families:
            if family.husband and family.wife:
                spouses.append(SpouseLink(person1=family.husband, person2=family.wife))
            for child_id in family.children:
                if family.husband:
                    parents.append(
                        ParentLink(
                            parent=family.husband, child=child_id, parent_role=ParentRole.FATHER
                        )
                    )
                if family.wife:
                    parents.append(
                        ParentLink(
                            parent=family.wife, child=child_id, parent_role=ParentRole.MOTHER
                        )
                    )

        return TreeView(
            individuals=session.individuals, spouses=tuple(spouses), parents=tuple(parents)
        )

    def get_summary(self, upload_id: str, user_id: UserId) -> PreviewSummary:
        return self._require(upload_id, user_id).summary()

    def save_resolution_decisions(
        self,
        upload_id: str,
        user_id: UserId,
        decisions: Iterable[DecisionInput],
    ) -> PreviewSummary:
        """Validate the whole batch, then replace the stored decisions.

        Raises :class:`InvalidResolutionError` without touching stored state when
        any entry is unusable.
        """

        session = self._require(upload_id, user_id)
        known = {annotated.id for annotated in session.individuals}
        validated = tuple(_coerce_decision(entry, known) for entry in decisions)

        updated = replace(session, decisions=validated)
        self._repository.save(updated)
        summary = updated.summary()
        log.info(
            "Saved %d resolution decisions for preview %s (%d skipped)",
            len(validated),
            upload_id,
            summary.existing_count,
        )
        return summary

    def get_resolution_decisions(
        self, upload_id: str, user_id: UserId
    ) -> tuple[ResolutionDecision, ...]:
        session = self._repository.get(PreviewKey(upload_id=upload_id, user_id=user_id))
        return session.decisions if session is not None else ()

    def clear(self, upload_id: str, user_id: UserId) -> None:
        self._repository.delete(PreviewKey(upload_id=upload_id, user_id=user_id))
        log.debug("Cleared preview %s for user %s", upload_id, user_id)

    def _require(self, upload_id: str, user_id: UserId) -> PreviewSession:
        session = self._repository.get(PreviewKey(upload_id=upload_id, user_id=user_id))
        if session is None:
            raise PreviewNotFoundError(upload_id, user_id)
        return session


def _sort_value(row: AnnotatedIndividual, attribute: str) -> str:
    value = getattr(row, attribute, None)
    if value is None:
        value = getattr(row.individual, attribute, None)
    return "" if value is None else str(value)


def _coerce_decision(entry: DecisionInput, known: set[InterchangeId]) -> ResolutionDecision:
    if isinstance(entry, ResolutionDecision):
        individual_id, raw_resolution = entry.individual_id, entry.resolution
        existing_person_id = entry.existing_person_id
    else:
        individual_id = entry.get("individual_id", entry.get("gedcomId"))
        raw_resolution = entry.get("resolution")
        existing_person_id = entry.get("existing_person_id", entry.get("existingPersonId"))

    try:
        resolution = Resolution(raw_resolution)
    except ValueError as exc:
        raise InvalidResolutionError(f"Invalid resolution option: {raw_resolution}") from exc

    if not isinstance(individual_id, str) or individual_id not in known:
        raise InvalidResolutionError(f"Unknown individual in resolution decision: {individual_id}")

    return ResolutionDecision(
        individual_id=individual_id,
        resolution=resolution,
        existing_person_id=None if existing_person_id is None else str(existing_person_id),
    )
