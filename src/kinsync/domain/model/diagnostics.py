"""Structured diagnostics shared by the parser, validators and merge checks."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import UTC, datetime

from .enums import IssueCode, Severity


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportIssue:
    """One error or warning, renderable without knowledge of the presentation layer."""

    severity: Severity
    code: IssueCode
    message: str
    record_id: str | None = None
    individual_name: str | None = None
    field: str | None = None
    line: int | None = None
    suggested_fix: str | None = None
    created_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(tz=UTC), compare=False)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


@dataclass(frozen=True, slots=True)
class DateError:
    """Per-field record of a date that could not be normalized."""

    field: str
    original: str
    error: str
