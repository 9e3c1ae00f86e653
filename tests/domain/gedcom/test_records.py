from __future__ import annotations

from kinsync.domain.gedcom.records import tokenize
from kinsync.domain.model import IssueCode, RecordKind, Severity


def test_tokenize_builds_nested_records() -> None:
    tree = tokenize("0 @I1@ INDI\n1 NAME John /Smith/\n1 BIRT\n2 DATE 1 JAN 1900\n0 TRLR\n")

    assert [record.tag for record in tree.records] == ["INDI", "TRLR"]
    individual = tree.records[0]
    assert individual.xref == "@I1@"
    assert individual.kind is RecordKind.INDIVIDUAL
    birth = individual.first("BIRT")
    assert birth is not None
    date = birth.first("DATE")
    assert date is not None
    assert date.value == "1 JAN 1900"
    assert date.line == 4
    assert tree.issues == []


def test_continuation_lines_fold_into_parent_value() -> None:
    tree = tokenize("0 @N1@ NOTE First part\n1 CONC , same line\n1 CONT Second line\n")

    note = tree.records[0]
    assert note.value == "First part, same line\nSecond line"
    assert note.children == []


def test_malformed_lines_are_reported_and_skipped() -> None:
    tree = tokenize("0 @I1@ INDI\nthis is not a record\n1 NAME Jane /Doe/\n3 DATE orphan\n")

    assert len(tree.records) == 1
    assert [child.tag for child in tree.records[0].children] == ["NAME"]
    assert [issue.line for issue in tree.issues] == [2, 4]
    assert all(issue.code is IssueCode.PARSE_ERROR for issue in tree.issues)
    assert all(issue.severity is Severity.WARNING for issue in tree.issues)


def test_pointer_only_recognises_cross_references() -> None:
    tree = tokenize("0 @F1@ FAM\n1 HUSB @I1@\n1 NOTE plain text\n")

    family = tree.records[0]
    husband = family.first("HUSB")
    note = family.first("NOTE")
    assert husband is not None
    assert husband.pointer == "@I1@"
    assert note is not None
    assert note.pointer is None


def test_unknown_top_level_tags_dispatch_as_other() -> None:
    tree = tokenize("0 HEAD\n0 @S1@ SOUR\n")

    assert [record.kind for record in tree.records] == [RecordKind.OTHER, RecordKind.OTHER]


def test_concatenation_keeps_trailing_space_of_the_previous_line() -> None:
    tree = tokenize("0 @I1@ INDI\n1 BIRT\n2 PLAC New \n3 CONC York\n1 SEX M\n")

    individual = tree.records[0]
    birth = individual.first("BIRT")
    assert birth is not None
    place = birth.first("PLAC")
    assert place is not None
    assert place.value == "New York"
    assert place.children == []
    sex = individual.first("SEX")
    assert sex is not None
    assert sex.line == 5


def test_lines_after_a_rejected_line_keep_their_numbers() -> None:
    tree = tokenize("0 HEAD\n\n0 @I1@ INDI\n1 NAME\n2 GIVN Ann\n1 name lower case\n1 SEX F\n")

    individual = tree.records[1]
    assert [child.tag for child in individual.children] == ["NAME", "SEX"]
    name = individual.first("NAME")
    assert name is not None
    assert name.value is None
    assert [child.line for child in individual.children] == [4, 7]
    assert [issue.line for issue in tree.issues] == [6]
    assert tree.issues[0].message == "Unrecognised line: 1 name lower case"
