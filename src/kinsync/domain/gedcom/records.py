"""Tagged record tree of an interchange file, read with python-gedcom."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gedcom.parser import GedcomFormatViolationError, Parser

from kinsync.domain.diagnostics import import_warning
from kinsync.domain.model import IssueCode, RecordKind

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gedcom.element.element import Element

    from kinsync.domain.model import ImportIssue

log = logging.getLogger(__name__)

_POINTER = re.compile(r"^@[^@\s]+@$")
_BOM = "\ufeff"
_CONTINUATION_TAGS = frozenset({"CONC", "CONT"})

type NumberedLine = tuple[int, str]


@dataclass(slots=True)
class GedcomRecord:
    level: int
    tag: str
    xref: str | None = None
    value: str | None = None
    line: int = 0
    children: list[GedcomRecord] = field(default_factory=list["GedcomRecord"], repr=False)

    @property
    def kind(self) -> RecordKind:
        return RecordKind.from_tag(self.tag)

    @property
    def pointer(self) -> str | None:
        if self.value is not None and _POINTER.match(self.value.strip()):
            return self.value.strip()
        return None

    def first(self, tag: str) -> GedcomRecord | None:
        return next((child for child in self.children if child.tag == tag), None)

    def all(self, tag: str) -> Iterator[GedcomRecord]:
        return (child for child in self.children if child.tag == tag)


@dataclass(slots=True)
class RecordTree:
    records: list[GedcomRecord] = field(default_factory=list[GedcomRecord])
    issues: list[ImportIssue] = field(default_factory=list["ImportIssue"])


class _LineFeed:
    """Byte stream for ``Parser.parse`` that remembers the last line handed out."""

    def __init__(self, lines: list[NumberedLine]) -> None:
        self._lines = lines
        self.position = -1

    def __iter__(self) -> Iterator[bytes]:
        for position, (_, text) in enumerate(self._lines):
            self.position = position
            yield f"{text}\n".encode()


def tokenize(content: str) -> RecordTree:
    """Build the record tree; lines the reader rejects are reported and skipped.

    python-gedcom stops at the first line that breaks the ``level [@xref@] TAG
    [value]`` layout or jumps more than one level. The offending line is dropped
    and the remaining lines are read again until the document is accepted.
    """

    lines = _numbered_lines(content)
    tree = RecordTree()

    while True:
        feed = _LineFeed(lines)
        parser = Parser()
        try:
            parser.parse(feed, strict=True)
        except GedcomFormatViolationError:
            line_number, text = lines.pop(feed.position)
            log.debug("Rejected line %d: %r", line_number, text)
            tree.issues.append(_malformed(line_number, text))
            continue
        break

    numbers = iter(line_number for line_number, _ in lines)
    tree.records = [
        _record_from(element, numbers) for element in parser.get_root_child_elements()
    ]
    log.debug("Tokenized %d top-level records (%d issues)", len(tree.records), len(tree.issues))
    return tree


def _numbered_lines(content: str) -> list[NumberedLine]:
    numbered: list[NumberedLine] = []
    for line_number, raw_line in enumerate(content.splitlines(), start=1):
        # trailing spaces are data when a CONC line follows
        text = raw_line.lstrip(_BOM).lstrip()
        if text.strip():
            numbered.append((line_number, text))
    return numbered


def _record_from(element: Element, numbers: Iterator[int]) -> GedcomRecord:
    # elements come back in the order their lines were read
    record = GedcomRecord(
        level=element.get_level(),
        tag=element.get_tag(),
        xref=element.get_pointer() or None,
        value=element.get_multi_line_value().strip() or None,
        line=next(numbers),
    )
    for child in element.get_child_elements():
        if child.get_tag() in _CONTINUATION_TAGS:
            _consume(child, numbers)
        else:
            record.children.append(_record_from(child, numbers))
    return record


def _consume(element: Element, numbers: Iterator[int]) -> None:
    next(numbers)
    for child in element.get_child_elements():
        _consume(child, numbers)


def _malformed(line_number: int, text: str) -> ImportIssue:
    return import_warning(
        code=IssueCode.PARSE_ERROR,
        message=f"Unrecognised line: {text[:80]}",
        line=line_number,
        suggested_fix=(
            "Check the line follows the 'level [@xref@] TAG [value]' layout "
            "and is at most one level below the line before it"
        ),
    )
