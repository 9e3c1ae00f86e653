# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import find_dotenv, load_dotenv

from kinsync.adapters.payloads import (
    dump_decisions,
    load_duplicate_matches,
    load_resolution_decisions,
)
from kinsync.app import (
    build_workspace,
    merge_people,
    parse_upload,
    preview_person_merge,
    store_preview,
)
from kinsync.config import configure_logging, get_preview_config
from kinsync.domain.diagnostics import format_issue, issues_to_csv
from kinsync.domain.errors import MergeBlockedError, PersonNotFoundError
from kinsync.domain.merge import MergeRequest
from kinsync.domain.model import SortOrder
from kinsync.domain.preview import IndividualsQuery

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from kinsync.app import UploadReport
    from kinsync.domain.merge import MergePreview
    from kinsync.domain.preview import AnnotatedIndividual, IndividualsPage

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import and reconcile family-tree data")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Parse a GEDCOM file and print statistics")
    parse_cmd.add_argument("file", type=Path, help="Path to the GEDCOM file")
    parse_cmd.add_argument(
        "--json",
        action="store_true",
        help="Print individuals and families as JSON instead of a summary",
    )

    validate = subparsers.add_parser("validate", help="Report parse and reference problems")
    validate.add_argument("file", type=Path, help="Path to the GEDCOM file")
    validate.add_argument(
        "--errors-csv",
        type=Path,
        help="Write every error and warning to this CSV file",
    )

    preview = subparsers.add_parser("preview", help="Show the reconciliation preview of a file")
    preview.add_argument("file", type=Path, help="Path to the GEDCOM file")
    preview.add_argument("--user-id", type=str, required=True, help="Owner of the preview")
    preview.add_argument(
        "--upload-id",
        type=str,
        help="Identifier of the upload (defaults to the file name)",
    )
    preview.add_argument(
        "--matches",
        type=Path,
        required=True,
        help="JSON file with duplicate candidates for the parsed individuals",
    )
    preview.add_argument(
        "--decisions",
        type=Path,
        help="JSON file with resolution decisions to record",
    )
    preview.add_argument("--page", type=int, default=1, help="Page number (default: %(default)s)")
    preview.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Individuals per page (defaults to config)",
    )
    preview.add_argument(
        "--sort-by",
        type=str,
        default="name",
        help="Individual attribute to sort on (default: %(default)s)",
    )
    preview.add_argument(
        "--sort-order",
        type=SortOrder,
        choices=list(SortOrder),
        default=SortOrder.ASC,
        help="Sort direction (default: %(default)s)",
    )
    preview.add_argument("--search", type=str, default="", help="Filter by name substring")

    for name, help_text in (
        ("merge-preview", "Preview merging one person into another"),
        ("merge", "Merge one person into another"),
    ):
        merge = subparsers.add_parser(name, help=help_text)
        merge.add_argument("--source", type=UUID, required=True, help="Person to merge away")
        merge.add_argument("--target", type=UUID, required=True, help="Person to keep")
        merge.add_argument("--user-id", type=str, required=True, help="Owner of both persons")
        merge.add_argument(
            "--allow-gender-mismatch",
            action="store_true",
            help="Merge even when both persons have different recorded genders",
        )

    return parser.parse_args(list(argv))


def _read_report(path: Path) -> UploadReport:
    report = parse_upload(path.read_text(encoding="utf-8-sig"))
    if not report.parsed.success:
        raise RuntimeError(report.parsed.error or f"Could not parse {path}")
    return report


def _read_json(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8"))


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _individual_row(row: AnnotatedIndividual) -> dict[str, object]:
    return {
        "id": row.id,
        "name": row.name,
        "first_name": row.first_name,
        "last_name": row.last_name,
        "sex": row.sex,
        "birth_date": row.birth_date,
        "death_date": row.death_date,
        "status": row.status.value,
        "existing_person_id": row.match.existing_person_id if row.match else None,
    }


def _page_payload(page: IndividualsPage) -> dict[str, object]:
    pagination, summary = page.pagination, page.summary
    return {
        "individuals": [_individual_row(row) for row in page.individuals],
        "pagination": {
            "page": pagination.page,
            "limit": pagination.limit,
            "total": pagination.total,
            "total_pages": pagination.total_pages,
        },
        "summary": {
            "total_individuals": summary.total_individuals,
            "new_count": summary.new_count,
            "duplicate_count": summary.duplicate_count,
            "existing_count": summary.existing_count,
        },
    }


def _merge_preview_payload(preview: MergePreview) -> dict[str, object]:
    return {
        "source_id": preview.source.id,
        "target_id": preview.target.id,
        "can_merge": preview.can_merge,
        "errors": list(preview.errors),
        "warnings": list(preview.warnings),
        "conflict_fields": [role.value for role in preview.conflict_fields],
        "merged": preview.merged,
        "relationships_to_transfer": len(preview.relationships_to_transfer),
        "existing_relationships": len(preview.existing_relationships),
    }


def _run_parse(args: argparse.Namespace) -> None:
    report = _read_report(args.file)
    parsed, statistics = report.parsed, report.statistics
    if args.json:
        _print_json(
            {
                "version": parsed.version,
                "individuals": [
                    {
                        "id": individual.id,
                        "name": individual.display_name,
                        "sex": individual.sex,
                        "birth_date": individual.birth_date,
                        "death_date": individual.death_date,
                    }
                    for individual in parsed.individuals
                ],
                "families": [
                    {
                        "id": family.id,
                        "husband": family.husband,
                        "wife": family.wife,
                        "children": list(family.children),
                        "marriage_date": family.marriage_date,
                    }
                    for family in parsed.families
                ],
                "issues": len(report.issues),
            }
        )
        return

    print(f"GEDCOM version: {statistics.version}")
    print(f"Individuals: {statistics.total_individuals}")
    print(f"Families: {statistics.total_families}")
    if statistics.date_range is not None:
        print(f"Dates: {statistics.date_range.earliest} to {statistics.date_range.latest}")
    print(f"Issues: {len(report.issues)}")


def _run_validate(args: argparse.Namespace) -> None:
    report = _read_report(args.file)
    for issue in report.issues:
        print(format_issue(issue))
        print()
    for relationship_issue in report.relationship_issues:
        print(f"{relationship_issue.kind}: {relationship_issue.description}")

    if args.errors_csv is not None:
        args.errors_csv.write_text(issues_to_csv(report.issues) + "\n", encoding="utf-8")
        log.info("Wrote %d issues to %s", len(report.issues), args.errors_csv)

    log.info(
        "Validation finished: issues=%s, relationship_issues=%s, orphans=%s",
        len(report.issues),
        len(report.relationship_issues),
        report.orphans.has_orphans,
    )


def _run_preview(args: argparse.Namespace) -> None:
    workspace = build_workspace()
    report = _read_report(args.file)
    upload_id = args.upload_id or args.file.name
    matches = load_duplicate_matches(_read_json(args.matches))
    store_preview(
        workspace,
        upload_id=upload_id,
        user_id=args.user_id,
        report=report,
        duplicate_matches=matches,
    )

    if args.decisions is not None:
        decisions = load_resolution_decisions(_read_json(args.decisions))
        workspace.save_resolution_decisions(upload_id, args.user_id, decisions)

    query = IndividualsQuery(
        page=args.page,
        limit=args.limit or get_preview_config().page_limit,
        sort_by=args.sort_by,
        sort_order=args.sort_order,
        search=args.search,
    )
    page = workspace.get_individuals(upload_id, args.user_id, query)

    payload = _page_payload(page)
    payload["decisions"] = dump_decisions(
        workspace.get_resolution_decisions(upload_id, args.user_id)
    )
    _print_json(payload)


def _run_merge_preview(args: argparse.Namespace) -> None:
    preview = preview_person_merge(
        args.source,
        args.target,
        args.user_id,
        allow_gender_mismatch=args.allow_gender_mismatch,
    )
    _print_json(_merge_preview_payload(preview))


def _run_merge(args: argparse.Namespace) -> None:
    result = merge_people(
        MergeRequest(
            source_id=args.source,
            target_id=args.target,
            user_id=args.user_id,
            allow_gender_mismatch=args.allow_gender_mismatch,
        )
    )
    _print_json(
        {
            "source_id": result.source_id,
            "target_id": result.target_id,
            "relationships_transferred": result.relationships_transferred,
            "relationships_deduplicated": result.relationships_deduplicated,
            "removed_source_relationships": result.removed_source_relationships,
            "merge_record_id": result.merge_record_id,
        }
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv(find_dotenv(usecwd=True))
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "preview" and parsed_args.page < 1:
            raise ValueError(f"Page must be >= 1, got {parsed_args.page}")  # noqa: TRY301
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else None)

    try:
        match parsed_args.command:
            case "parse":
                _run_parse(parsed_args)
            case "validate":
                _run_validate(parsed_args)
            case "preview":
                _run_preview(parsed_args)
            case "merge-preview":
                _run_merge_preview(parsed_args)
            case "merge":
                _run_merge(parsed_args)
            case _:
                raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ValueError, MergeBlockedError, PersonNotFoundError):
        log.exception("Request rejected")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
