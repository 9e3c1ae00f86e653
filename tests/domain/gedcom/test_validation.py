from __future__ import annotations

from kinsync.domain.gedcom import (
    RelationshipIssueKind,
    collect_parsing_errors,
    parse,
    validate_orphaned_references,
    validate_relationship_consistency,
)
from kinsync.domain.model import Severity
from tests.helpers.gedcom import family_record, gedcom_document, individual_record, smith_family


def test_orphaned_child_is_dropped_from_cleaned_family() -> None:
    parsed = parse(
        gedcom_document(
            individual_record("@I1@", name="John /Smith/", fams=["@F1@"]),
            family_record("@F1@", husband="@I1@", children=["@I99@"]),
        )
    )

    validation = validate_orphaned_references(parsed)

    assert validation.has_orphans
    (warning,) = validation.warnings
    assert warning.field == "children"
    assert warning.record_id == "@F1@"
    assert warning.severity is Severity.WARNING
    assert "@I99@" in warning.message
    (cleaned,) = validation.cleaned_families
    assert cleaned.children == ()
    assert cleaned.husband == "@I1@"


def test_original_families_are_left_untouched() -> None:
    parsed = parse(
        gedcom_document(family_record("@F1@", husband="@I8@", wife="@I9@", children=["@I7@"]))
    )
    before = parsed.families

    validation = validate_orphaned_references(parsed)

    assert parsed.families is before
    assert parsed.families[0].husband == "@I8@"
    assert parsed.families[0].children == ("@I7@",)
    assert [warning.field for warning in validation.warnings] == ["husband", "wife", "children"]
    cleaned = validation.cleaned_families[0]
    assert (cleaned.husband, cleaned.wife, cleaned.children) == (None, None, ())


def test_every_cleaned_pointer_resolves() -> None:
    parsed = parse(
        gedcom_document(
            individual_record("@I1@"),
            individual_record("@I2@"),
            family_record("@F1@", husband="@I1@", wife="@I5@", children=["@I2@", "@I6@"]),
            family_record("@F2@", husband="@I4@", children=["@I1@"]),
        )
    )
    known = {individual.id for individual in parsed.individuals}

    validation = validate_orphaned_references(parsed)

    for family in validation.cleaned_families:
        pointers = [member for member in (family.husband, family.wife) if member]
        assert set(pointers) | set(family.children) <= known


def test_clean_file_has_no_orphans() -> None:
    validation = validate_orphaned_references(parse(smith_family()))

    assert not validation.has_orphans
    assert validation.warnings == ()
    assert len(validation.cleaned_families) == 1


def test_relationship_consistency_reports_unconfirmed_memberships() -> None:
    parsed = parse(
        gedcom_document(
            individual_record("@I1@", name="John /Smith/", fams=["@F1@"]),
            individual_record("@I2@", name="Alice /Smith/", famc="@F1@"),
            individual_record("@I3@", name="Ghost /Ref/", famc="@F404@"),
            family_record("@F1@"),
        )
    )

    issues = validate_relationship_consistency(parsed)

    assert [issue.kind for issue in issues] == [
        RelationshipIssueKind.CHILD_FAMILY_MISMATCH,
        RelationshipIssueKind.SPOUSE_FAMILY_MISMATCH,
    ]
    affected = {identifier for issue in issues for identifier in issue.affected_ids}
    assert {"@I1@", "@I2@", "@F1@"} <= affected
    assert "@I3@" not in affected


def test_relationship_consistency_accepts_consistent_file() -> None:
    assert validate_relationship_consistency(parse(smith_family())) == []


def test_collect_parsing_errors_names_individual_and_field() -> None:
    parsed = parse(
        gedcom_document(individual_record("@I1@", name="Jane /Doe/", death="sometime later"))
    )

    (issue,) = collect_parsing_errors(parsed.individuals)

    assert issue.record_id == "@I1@"
    assert issue.individual_name == "Jane Doe"
    assert issue.field == "death_date"
    assert issue.message.startswith('Could not parse date "sometime later"')
    assert issue.suggested_fix is not None
