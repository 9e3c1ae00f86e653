"""Public domain model surface."""

from __future__ import annotations

from kinsync.domain.model.diagnostics import DateError, ImportIssue
from kinsync.domain.model.entity import Entity, new_id
from kinsync.domain.model.enums import (
    DateModifier,
    Gender,
    IssueCode,
    ParentRole,
    PreviewStatus,
    RecordKind,
    RelationshipType,
    Resolution,
    Severity,
    SortOrder,
)
from kinsync.domain.model.interchange import (
    DateRange,
    DuplicateMatch,
    Family,
    Individual,
    LifeEvent,
    ParsingResult,
    ParsingStatistics,
)
from kinsync.domain.model.people import PERSON_FIELDS, MergeRecord, Person, Relationship
from kinsync.domain.model.primitives import CanonicalDate, InterchangeId, UserId

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    # diagnostics
    "DateError",
    "ImportIssue",
    # interchange
    "DateRange",
    "DuplicateMatch",
    "Family",
    "Individual",
    "LifeEvent",
    "ParsingResult",
    "ParsingStatistics",
    # people
    "PERSON_FIELDS",
    "MergeRecord",
    "Person",
    "Relationship",
    # enums
    "DateModifier",
    "Gender",
    "IssueCode",
    "ParentRole",
    "PreviewStatus",
    "RecordKind",
    "RelationshipType",
    "Resolution",
    "Severity",
    "SortOrder",
    # primitives
    "CanonicalDate",
    "InterchangeId",
    "UserId",
]
