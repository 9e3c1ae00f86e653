"""Interchange (GEDCOM) parsing and validation."""

from __future__ import annotations

from kinsync.domain.gedcom.dates import normalize_date
from kinsync.domain.gedcom.parser import (
    SUPPORTED_VERSIONS,
    detect_version,
    extract_statistics,
    parse,
    parse_file,
    validate_version,
)
from kinsync.domain.gedcom.validation import (
    OrphanValidation,
    RelationshipIssue,
    RelationshipIssueKind,
    collect_parsing_errors,
    validate_orphaned_references,
    validate_relationship_consistency,
)

__all__ = [
    "SUPPORTED_VERSIONS",
    "OrphanValidation",
    "RelationshipIssue",
    "RelationshipIssueKind",
    "collect_parsing_errors",
    "detect_version",
    "extract_statistics",
    "normalize_date",
    "parse",
    "parse_file",
    "validate_orphaned_references",
    "validate_relationship_consistency",
    "validate_version",
]
