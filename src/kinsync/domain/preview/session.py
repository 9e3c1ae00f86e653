"""Value types of the reconciliation workspace."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from math import ceil
from typing import TYPE_CHECKING

from kinsync.domain.model import ParentRole, PreviewStatus, Resolution, SortOrder

if TYPE_CHECKING:
    from kinsync.domain.model import DuplicateMatch, Family, Individual, InterchangeId, UserId


@dataclass(frozen=True, slots=True)
class PreviewKey:
    """Composite identity of a preview session: one upload as seen by one user."""

    upload_id: str
    user_id: UserId


@dataclass(frozen=True, slots=True)
class AnnotatedIndividual:
    """A parsed individual tagged with its reconciliation status."""

    individual: Individual
    status: PreviewStatus
    match: DuplicateMatch | None = None

    @property
    def id(self) -> InterchangeId:
        return self.individual.id

    @property
    def name(self) -> str:
        return self.individual.display_name

    @property
    def first_name(self) -> str | None:
        return self.individual.first_name

    @property
    def last_name(self) -> str | None:
        return self.individual.last_name

    @property
    def sex(self) -> str | None:
        return self.individual.sex

    @property
    def birth_date(self) -> str | None:
        return self.individual.birth_date

    @property
    def death_date(self) -> str | None:
        return self.individual.death_date

    def matches_search(self, needle: str) -> bool:
        """Case-insensitive substring match over the name fields."""
        lowered = needle.lower()
        return any(
            lowered in (value or "").lower()
            for value in (self.individual.name, self.first_name, self.last_name)
        )


@dataclass(frozen=True, slots=True)
class PreviewSummary:
    total_individuals: int
    new_count: int
    duplicate_count: int
    existing_count: int


@dataclass(frozen=True, slots=True)
class ResolutionDecision:
    individual_id: InterchangeId
    resolution: Resolution
    existing_person_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PreviewSession:
    key: PreviewKey
    individuals: tuple[AnnotatedIndividual, ...]
    families: tuple[Family, ...] = ()
    matches: tuple[DuplicateMatch, ...] = ()
    decisions: tuple[ResolutionDecision, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def summary(self) -> PreviewSummary:
        """Counts derived from the current statuses and decisions."""
        statuses = [annotated.status for annotated in self.individuals]
        return PreviewSummary(
            total_individuals=len(statuses),
            new_count=statuses.count(PreviewStatus.NEW),
            duplicate_count=statuses.count(PreviewStatus.DUPLICATE),
            existing_count=sum(
                1 for decision in self.decisions if decision.resolution is Resolution.SKIP
            ),
        )

    def find(self, individual_id: InterchangeId) -> AnnotatedIndividual | None:
        return next((item for item in self.individuals if item.id == individual_id), None)

    def family(self, family_id: InterchangeId | None) -> Family | None:
        if family_id is None:
            return None
        return next((family for family in self.families if family.id == family_id), None)


@dataclass(frozen=True, slots=True)
class IndividualsQuery:
    """Filtering, ordering and paging options for the individuals view.

    ``sort_by`` names any individual attribute; camelCase spellings such as
    ``birthDate`` are accepted.
    """

    page: int = 1
    limit: int = 50
    sort_by: str = "name"
    sort_order: SortOrder = SortOrder.ASC
    search: str = ""

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")


@dataclass(frozen=True, slots=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def of(cls, *, page: int, limit: int, total: int) -> Pagination:
        return cls(page=page, limit=limit, total=total, total_pages=ceil(total / limit))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True, slots=True)
class IndividualsPage:
    individuals: tuple[AnnotatedIndividual, ...]
    pagination: Pagination
    summary: PreviewSummary


@dataclass(frozen=True, slots=True)
class RelativeView:
    individual_id: InterchangeId
    name: str
    birth_date: str | None = None
    death_date: str | None = None
    role: ParentRole | None = None

    @classmethod
    def of(cls, annotated: AnnotatedIndividual, *, role: ParentRole | None = None) -> RelativeView:
        return cls(
            individual_id=annotated.id,
            name=annotated.name,
            birth_date=annotated.birth_date,
            death_date=annotated.death_date,
            role=role,
        )


@dataclass(frozen=True, slots=True)
class PersonView:
    person: AnnotatedIndividual
    parents: tuple[RelativeView, ...] = ()
    spouses: tuple[RelativeView, ...] = ()
    children: tuple[RelativeView, ...] = ()


@dataclass(frozen=True, slots=True)
class SpouseLink:
    person1: InterchangeId
    person2: InterchangeId


@dataclass(frozen=True, slots=True)
class ParentLink:
    parent: InterchangeId
    child: InterchangeId
    parent_role: ParentRole


@dataclass(frozen=True, slots=True)
class TreeView:
    individuals: tuple[AnnotatedIndividual, ...]
    spouses: tuple[SpouseLink, ...] = ()
    parents: tuple[ParentLink, ...] = ()
