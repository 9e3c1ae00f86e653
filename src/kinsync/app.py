"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from kinsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyPeopleUnitOfWork,
    is_started,
    startup,
)
from kinsync.config import get_preview_config
from kinsync.domain.gedcom import (
    OrphanValidation,
    RelationshipIssue,
    extract_statistics,
    parse,
    validate_orphaned_references,
    validate_relationship_consistency,
)
from kinsync.domain.merge import MergePreview, MergeRequest, MergeResult, PersonMergeExecutor
from kinsync.domain.merge import preview_merge as _preview_merge
from kinsync.domain.ports.unit_of_work import PeopleUnitOfWork
from kinsync.domain.preview import InMemoryPreviewRepository, ReconciliationWorkspace

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from kinsync.config import PreviewConfig
    from kinsync.domain.model import (
        DuplicateMatch,
        ImportIssue,
        ParsingResult,
        ParsingStatistics,
        UserId,
    )
    from kinsync.domain.preview import PreviewSession

UnitOfWorkFactory = Callable[[], PeopleUnitOfWork]


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UploadReport:
    """Parsed upload plus every derived validation view."""

    parsed: ParsingResult
    statistics: ParsingStatistics
    relationship_issues: tuple[RelationshipIssue, ...]
    orphans: OrphanValidation

    @property
    def issues(self) -> tuple[ImportIssue, ...]:
        return self.parsed.errors + self.orphans.warnings


def parse_upload(content: str) -> UploadReport:
    """Parse interchange text and run the referential checks over the result."""

    parsed = parse(content)
    if not parsed.success:
        log.warning("Upload rejected: %s", parsed.error)
        return UploadReport(
            parsed=parsed,
            statistics=extract_statistics(parsed),
            relationship_issues=(),
            orphans=OrphanValidation(has_orphans=False),
        )

    relationship_issues = tuple(validate_relationship_consistency(parsed))
    orphans = validate_orphaned_references(parsed)
    log.info(
        "Validated upload: %d individuals, %d families, %d relationship issues, orphans=%s",
        len(parsed.individuals),
        len(parsed.families),
        len(relationship_issues),
        orphans.has_orphans,
    )
    return UploadReport(
        parsed=parsed,
        statistics=extract_statistics(parsed),
        relationship_issues=relationship_issues,
        orphans=orphans,
    )


def build_workspace(config: PreviewConfig | None = None) -> ReconciliationWorkspace:
    """Workspace over an in-process preview store sized from configuration."""

    effective = config or get_preview_config()
    repository = InMemoryPreviewRepository(
        ttl_seconds=effective.ttl_seconds,
        max_sessions=effective.max_sessions,
    )
    return ReconciliationWorkspace(repository)


def store_preview(
    workspace: ReconciliationWorkspace,
    *,
    upload_id: str,
    user_id: UserId,
    report: UploadReport,
    duplicate_matches: Sequence[DuplicateMatch] = (),
) -> PreviewSession:
    """Store an upload for review, using orphan-free families for navigation."""

    return workspace.store(
        upload_id,
        user_id,
        report.parsed,
        duplicate_matches,
        families=report.orphans.cleaned_families,
    )


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyPeopleUnitOfWork


def preview_person_merge(
    source_id: UUID,
    target_id: UUID,
    user_id: UserId,
    *,
    allow_gender_mismatch: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> MergePreview:
    """Read-only merge preview using the configured persistence adapter."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        return _preview_merge(
            uow,
            source_id,
            target_id,
            user_id,
            allow_gender_mismatch=allow_gender_mismatch,
        )


def merge_people(
    request: MergeRequest,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> MergeResult:
    """Merge two persisted people using the configured persistence adapter."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    log.info(
        "Starting merge: source=%s, target=%s, user=%s",
        request.source_id,
        request.target_id,
        request.user_id,
    )
    result = PersonMergeExecutor(effective_uow).execute(request)
    log.info(
        "Finished merge: transferred=%s, deduplicated=%s, removed=%s",
        result.relationships_transferred,
        result.relationships_deduplicated,
        result.removed_source_relationships,
    )
    return result
