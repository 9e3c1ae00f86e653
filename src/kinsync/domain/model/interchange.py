"""Parsed interchange records.

These are produced once per upload and never mutated afterwards; derived views
(cleaned families, annotated preview rows) are built as new objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .diagnostics import DateError, ImportIssue
    from .primitives import CanonicalDate, InterchangeId


@dataclass(frozen=True, slots=True)
class LifeEvent:
    date: CanonicalDate | None = None
    place: str | None = None

    @property
    def normalized_date(self) -> str | None:
        if self.date is None or not self.date.valid:
            return None
        return self.date.normalized


@dataclass(frozen=True, slots=True, kw_only=True)
class Individual:
    id: InterchangeId
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    sex: str | None = None
    birth: LifeEvent | None = None
    death: LifeEvent | None = None
    child_of_family: InterchangeId | None = None
    spouse_families: tuple[InterchangeId, ...] = ()
    date_errors: tuple[DateError, ...] = ()

    @property
    def birth_date(self) -> str | None:
        return self.birth.normalized_date if self.birth is not None else None

    @property
    def death_date(self) -> str | None:
        return self.death.normalized_date if self.death is not None else None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass(frozen=True, slots=True, kw_only=True)
class Family:
    id: InterchangeId
    husband: InterchangeId | None = None
    wife: InterchangeId | None = None
    children: tuple[InterchangeId, ...] = ()
    marriage_date: str | None = None

    @property
    def spouses(self) -> tuple[InterchangeId, ...]:
        return tuple(member for member in (self.husband, self.wife) if member is not None)


@dataclass(frozen=True, slots=True, kw_only=True)
class ParsingResult:
    """Outcome of parsing one interchange file.

    ``success`` is false only for fatal problems (missing/unsupported version);
    ``error`` then holds the reason. Non-fatal problems live in ``errors``.
    """

    success: bool
    version: str | None = None
    individuals: tuple[Individual, ...] = ()
    families: tuple[Family, ...] = ()
    errors: tuple[ImportIssue, ...] = ()
    error: str | None = None

    def individual(self, individual_id: InterchangeId) -> Individual | None:
        for individual in self.individuals:
            if individual.id == individual_id:
                return individual
        return None


@dataclass(frozen=True, slots=True)
class DateRange:
    earliest: str
    latest: str


@dataclass(frozen=True, slots=True)
class ParsingStatistics:
    total_individuals: int
    total_families: int
    version: str | None
    date_range: DateRange | None = None


@dataclass(frozen=True, slots=True)
class DuplicateMatch:
    """Upstream candidate pairing of a parsed individual with a persisted person."""

    source_individual_id: InterchangeId
    existing_person_id: str
    confidence: float
    matching_fields: tuple[str, ...] = field(default_factory=tuple)
