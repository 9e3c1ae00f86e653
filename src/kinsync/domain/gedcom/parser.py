"""Parse interchange text into immutable individuals and families.

Only a missing or unsupported version is fatal. Every other problem (a bad
date, a malformed line) becomes a warning on the result while parsing goes on.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from kinsync.domain.diagnostics import import_error, import_warning
from kinsync.domain.model import (
    DateError,
    DateRange,
    Family,
    Individual,
    IssueCode,
    LifeEvent,
    ParsingResult,
    ParsingStatistics,
    RecordKind,
)

from .dates import INVALID_DATE_FORMAT, normalize_date
from .records import tokenize

if TYPE_CHECKING:
    from kinsync.domain.model import ImportIssue

    from .records import GedcomRecord

log = getLogger(__name__)

SUPPORTED_VERSIONS: Final[tuple[str, ...]] = ("5.5.1", "7.0")
VERSION_NOT_FOUND: Final[str] = "GEDCOM version not found in file"

_GEDC = re.compile(r"^1\s+GEDC\b")
_VERS = re.compile(r"^2\s+VERS\s+(.+)")
_NAME = re.compile(r"^([^/]*)\s*/([^/]*)/")

# Event tag -> field name recorded on date errors.
_EVENT_FIELDS: Final[dict[str, str]] = {"BIRT": "birth_date", "DEAT": "death_date"}


@dataclass(frozen=True, slots=True)
class VersionCheck:
    valid: bool
    error: str | None = None


def detect_version(content: str) -> str | None:
    """Return the version declared by the ``1 GEDC`` / ``2 VERS`` pair, if any."""

    lines = content.splitlines()
    for index, raw_line in enumerate(lines):
        if not _GEDC.match(raw_line.strip()):
            continue
        if index + 1 < len(lines):
            match = _VERS.match(lines[index + 1].strip())
            if match:
                return match.group(1).strip()
    return None


def validate_version(version: str | None) -> VersionCheck:
    if not version:
        return VersionCheck(valid=False, error=VERSION_NOT_FOUND)
    if version not in SUPPORTED_VERSIONS:
        return VersionCheck(
            valid=False,
            error=(
                f"GEDCOM version {version} is not supported. "
                f"Please use version {' or '.join(SUPPORTED_VERSIONS)}"
            ),
        )
    return VersionCheck(valid=True)


def parse(content: str) -> ParsingResult:
    """Parse interchange text into individuals, families and non-fatal issues."""

    version = detect_version(content)
    check = validate_version(version)
    if not check.valid:
        log.warning("Rejected interchange file: %s", check.error)
        issue = import_error(
            code=IssueCode.UNSUPPORTED_VERSION,
            message=check.error or VERSION_NOT_FOUND,
            suggested_fix=f"Export the file as GEDCOM {' or '.join(SUPPORTED_VERSIONS)}",
        )
        return ParsingResult(success=False, version=version, errors=(issue,), error=check.error)

    tree = tokenize(content)
    issues: list[ImportIssue] = list(tree.issues)
    individuals: list[Individual] = []
    families: list[Family] = []

    for record in tree.records:
        match record.kind:
            case RecordKind.INDIVIDUAL:
                individuals.append(_extract_individual(record, issues))
            case RecordKind.FAMILY:
                families.append(_extract_family(record))
            case RecordKind.OTHER:
                continue

    log.debug(
        "Parsed %d individuals, %d families, %d issues (version %s)",
        len(individuals),
        len(families),
        len(issues),
        version,
    )
    return ParsingResult(
        success=True,
        version=version,
        individuals=tuple(individuals),
        families=tuple(families),
        errors=tuple(issues),
    )


def parse_file(path: Path | str, *, encoding: str = "utf-8-sig") -> ParsingResult:
    """Read ``path`` and parse it; a leading byte-order mark is tolerated."""

    source = Path(path)
    result = parse(source.read_text(encoding=encoding))
    log.info(
        "Parsed %s: %d individuals, %d families, %d issues",
        source.name,
        len(result.individuals),
        len(result.families),
        len(result.errors),
    )
    return result


def extract_statistics(result: ParsingResult) -> ParsingStatistics:
    dates = sorted(
        value
        for individual in result.individuals
        for value in (individual.birth_date, individual.death_date)
        if value
    )
    date_range = DateRange(earliest=dates[0], latest=dates[-1]) if dates else None
    return ParsingStatistics(
        total_individuals=len(result.individuals),
        total_families=len(result.families),
        version=result.version,
        date_range=date_range,
    )


def split_name(value: str) -> tuple[str, str | None]:
    """Split ``"John /Smith/"`` into first and last name; no slashes means no surname."""

    match = _NAME.match(value)
    if match:
        return match.group(1).strip(), match.group(2).strip()
    return value.strip(), None


def _extract_individual(record: GedcomRecord, issues: list[ImportIssue]) -> Individual:
    individual_id = record.xref or f"@line{record.line}@"
    name = first_name = last_name = None
    name_record = record.first("NAME")
    if name_record is not None and name_record.value:
        name = name_record.value
        first_name, last_name = split_name(name)

    sex_record = record.first("SEX")
    date_errors: list[DateError] = []
    events: dict[str, LifeEvent | None] = {}

    for tag, field_name in _EVENT_FIELDS.items():
        event_record = record.first(tag)
        if event_record is None:
            events[tag] = None
            continue
        date = None
        date_record = event_record.first("DATE")
        if date_record is not None:
            candidate = normalize_date(date_record.value)
            if candidate.valid:
                date = candidate
            else:
                original = date_record.value or ""
                date_errors.append(
                    DateError(
                        field=field_name,
                        original=original,
                        error=candidate.error or INVALID_DATE_FORMAT,
                    )
                )
                issues.append(
                    import_warning(
                        code=IssueCode.PARSE_ERROR,
                        message=f"Invalid date format in {tag} tag: {original}",
                        record_id=individual_id,
                        individual_name=name,
                        field=field_name,
                        line=date_record.line,
                    )
                )
        place_record = event_record.first("PLAC")
        events[tag] = LifeEvent(
            date=date, place=place_record.value if place_record is not None else None
        )

    child_of = next(
        (pointer for famc in record.all("FAMC") if (pointer := famc.pointer)), None
    )
    spouse_families = tuple(pointer for fams in record.all("FAMS") if (pointer := fams.pointer))

    return Individual(
        id=individual_id,
        name=name,
        first_name=first_name,
        last_name=last_name,
        sex=sex_record.value if sex_record is not None else None,
        birth=events["BIRT"],
        death=events["DEAT"],
        child_of_family=child_of,
        spouse_families=spouse_families,
        date_errors=tuple(date_errors),
    )


def _extract_family(record: GedcomRecord) -> Family:
    husband = record.first("HUSB")
    wife = record.first("WIFE")

    marriage_date = None
    marriage = record.first("MARR")
    if marriage is not None and (date_record := marriage.first("DATE")) is not None:
        candidate = normalize_date(date_record.value)
        # Unreadable marriage dates are dropped without a warning.
        marriage_date = candidate.normalized if candidate.valid else None

    return Family(
        id=record.xref or f"@line{record.line}@",
        husband=husband.pointer if husband is not None else None,
        wife=wife.pointer if wife is not None else None,
        children=tuple(pointer for child in record.all("CHIL") if (pointer := child.pointer)),
        marriage_date=marriage_date,
    )
