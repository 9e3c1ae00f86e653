"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RecordKind(StrEnum):
    """Top-level interchange record kinds the parser dispatches on."""

    INDIVIDUAL = "INDI"
    FAMILY = "FAM"
    OTHER = "OTHER"

    @classmethod
    def from_tag(cls, tag: str) -> RecordKind:
        try:
            return cls(tag)
        except ValueError:
            return cls.OTHER


class DateModifier(StrEnum):
    ABOUT = "ABT"
    BEFORE = "BEF"
    AFTER = "AFT"
    BETWEEN = "BET"
    CALCULATED = "CAL"
    ESTIMATED = "EST"


class Gender(StrEnum):
    MALE = "male"
    FEMALE = "female"
    UNSPECIFIED = "unspecified"
    OTHER = "other"


class RelationshipType(StrEnum):
    PARENT_OF = "parent_of"
    SPOUSE = "spouse"


class ParentRole(StrEnum):
    MOTHER = "mother"
    FATHER = "father"


class PreviewStatus(StrEnum):
    NEW = "new"
    DUPLICATE = "duplicate"
    EXISTING = "existing"


class Resolution(StrEnum):
    MERGE = "merge"
    IMPORT_AS_NEW = "import_as_new"
    SKIP = "skip"


class Severity(StrEnum):
    ERROR = "Error"
    WARNING = "Warning"


class IssueCode(StrEnum):
    UNSUPPORTED_VERSION = "UNSUPPORTED_VERSION"
    PARSE_ERROR = "PARSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    VALIDATION_WARNING = "VALIDATION_WARNING"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    MERGE_BLOCKED = "MERGE_BLOCKED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"
