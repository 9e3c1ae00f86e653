"""Construction and rendering of import diagnostics.

Every issue carries a human-readable message, a machine-checkable code, the
offending record id and, where one exists, a suggested fix. Rendering here is
plain text and CSV only; presentation belongs to callers.
"""

from __future__ import annotations

import csv
import io
import re
from typing import TYPE_CHECKING, Final

from kinsync.domain.model import ImportIssue, IssueCode, Severity

if TYPE_CHECKING:
    from collections.abc import Iterable

CSV_HEADERS: Final[tuple[str, ...]] = (
    "Severity",
    "Line",
    "GEDCOM ID",
    "Name",
    "Field",
    "Error",
    "Suggested Fix",
)


def import_error(
    *,
    message: str,
    code: IssueCode = IssueCode.UNKNOWN_ERROR,
    record_id: str | None = None,
    individual_name: str | None = None,
    field: str | None = None,
    line: int | None = None,
    suggested_fix: str | None = None,
) -> ImportIssue:
    return ImportIssue(
        severity=Severity.ERROR,
        code=code,
        message=message,
        record_id=record_id,
        individual_name=individual_name,
        field=field,
        line=line,
        suggested_fix=suggested_fix,
    )


def import_warning(
    *,
    message: str,
    code: IssueCode = IssueCode.VALIDATION_WARNING,
    record_id: str | None = None,
    individual_name: str | None = None,
    field: str | None = None,
    line: int | None = None,
    suggested_fix: str | None = None,
) -> ImportIssue:
    return ImportIssue(
        severity=Severity.WARNING,
        code=code,
        message=message,
        record_id=record_id,
        individual_name=individual_name,
        field=field,
        line=line,
        suggested_fix=suggested_fix,
    )


_ID_DECORATION = re.compile(r"[@A-Za-z]")


def format_issue(issue: ImportIssue) -> str:
    """Render an issue as a multi-line, operator-facing message."""

    parts: list[str] = []

    if issue.record_id:
        number = _ID_DECORATION.sub("", issue.record_id).lstrip("0") or "0"
        parts.append(f"Import failed at record #{number}")
    if issue.line:
        parts.append(f"Line {issue.line} in GEDCOM file")

    if issue.individual_name and issue.record_id:
        parts.append(f"Individual: {issue.individual_name} ({issue.record_id})")
    elif issue.individual_name:
        parts.append(f"Individual: {issue.individual_name}")
    elif issue.record_id:
        parts.append(f"GEDCOM ID: {issue.record_id}")

    if issue.field:
        parts.append(f"Field: {issue.field}")

    if issue.code is IssueCode.CONSTRAINT_VIOLATION:
        parts.append(f"Database constraint violation: {issue.message}")
    else:
        parts.append(f"Error: {issue.message}")

    if issue.suggested_fix:
        parts.append(f"Suggested fix: {issue.suggested_fix}")

    return "\n".join(parts)


def issues_to_csv(issues: Iterable[ImportIssue]) -> str:
    """Render issues as a CSV error log (header row included)."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for issue in issues:
        writer.writerow(
            (
                issue.severity.value,
                "" if issue.line is None else str(issue.line),
                issue.record_id or "",
                issue.individual_name or "",
                issue.field or "",
                issue.message,
                issue.suggested_fix or "",
            )
        )
    return buffer.getvalue().rstrip("\n")
