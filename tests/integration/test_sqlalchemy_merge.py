from __future__ import annotations

import time
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select

from kinsync.adapters.sqlalchemy.repositories import SqlAlchemyRelationshipRepository
from kinsync.app import merge_people, preview_person_merge
from kinsync.domain.errors import MergeBlockedError
from kinsync.domain.merge import MergeRequest
from kinsync.domain.model import MergeRecord, Person, Relationship, RelationshipType
from tests.helpers.people import OWNER, father_of, make_person, married, mother_of, persist

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from kinsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyPeopleUnitOfWork

    UowFactory = Callable[[], SqlAlchemyPeopleUnitOfWork]


def _edges_of(uow_factory: UowFactory, person_id: UUID) -> list[Relationship]:
    with uow_factory() as uow:
        return uow.repositories.relationships.for_person(person_id)


def _count(uow_factory: UowFactory, entity: type[object]) -> int:
    with uow_factory() as uow:
        return uow.session.execute(select(func.count()).select_from(entity)).scalar_one()


@pytest.mark.integration
def test_merge_moves_edges_and_writes_audit_row(sqlite_unit_of_work: UowFactory) -> None:
    source = make_person("Augusta Ada", "King", birth_date="1815-12-10")
    target = make_person("Ada", "Lovelace", birth_date="1815")
    mum, child = make_person("Anne"), make_person("Byron")
    persist(
        sqlite_unit_of_work,
        source,
        target,
        mum,
        child,
        mother_of(mum, source),
        mother_of(source, child),
    )

    result = merge_people(
        MergeRequest(source_id=source.id, target_id=target.id, user_id=OWNER),
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert result.relationships_transferred == 2
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.people.get(source.id) is None
        stored = uow.repositories.people.get(target.id)
        assert stored is not None
        assert stored.first_name == "Augusta Ada"
        assert stored.last_name == "Lovelace"
        assert stored.birth_date == "1815-12-10"
        (record,) = uow.repositories.merges.for_target(target.id)
        assert record.source_id == source.id
        assert record.relationships_transferred == 2
    assert _edges_of(sqlite_unit_of_work, source.id) == []
    assert len(_edges_of(sqlite_unit_of_work, target.id)) == 2


@pytest.mark.integration
@pytest.mark.parametrize("target_already_married", [False, True])
def test_spouse_pair_leaves_exactly_one_edge_on_target(
    sqlite_unit_of_work: UowFactory,
    target_already_married: bool,
) -> None:
    source, target, spouse = make_person(), make_person(), make_person("Spouse")
    entities: list[Person | Relationship] = [source, target, spouse, married(source, spouse)]
    if target_already_married:
        entities.append(married(target, spouse))
    persist(sqlite_unit_of_work, *entities)

    merge_people(
        MergeRequest(source_id=source.id, target_id=target.id, user_id=OWNER),
        unit_of_work_factory=sqlite_unit_of_work,
    )

    spouse_edges = [
        edge
        for edge in _edges_of(sqlite_unit_of_work, target.id)
        if edge.type is RelationshipType.SPOUSE
    ]
    assert len(spouse_edges) == 1
    assert spouse_edges[0].involves(spouse.id)


@pytest.mark.integration
def test_shared_parent_is_deduplicated_against_unique_index(
    sqlite_unit_of_work: UowFactory,
) -> None:
    source, target, dad = make_person(), make_person(), make_person("Dad")
    persist(
        sqlite_unit_of_work,
        source,
        target,
        dad,
        father_of(dad, source),
        father_of(dad, target),
    )

    result = merge_people(
        MergeRequest(source_id=source.id, target_id=target.id, user_id=OWNER),
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert result.relationships_deduplicated == 1
    assert len(_edges_of(sqlite_unit_of_work, dad.id)) == 1


@pytest.mark.integration
def test_failure_mid_transfer_rolls_everything_back(
    sqlite_unit_of_work: UowFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    source, target = make_person(), make_person()
    mum, spouse, child = make_person("Mum"), make_person("Spouse"), make_person("Child")
    persist(
        sqlite_unit_of_work,
        source,
        target,
        mum,
        spouse,
        child,
        mother_of(mum, source),
        married(source, spouse),
        mother_of(source, child),
    )
    before = {edge.id for edge in _edges_of(sqlite_unit_of_work, source.id)}

    original_add = SqlAlchemyRelationshipRepository.add
    calls: list[Relationship] = []

    def failing_add(self: SqlAlchemyRelationshipRepository, entity: Relationship) -> None:
        calls.append(entity)
        if len(calls) == 2:
            raise RuntimeError("simulated storage failure")
        original_add(self, entity)

    monkeypatch.setattr(SqlAlchemyRelationshipRepository, "add", failing_add)

    with pytest.raises(RuntimeError, match="simulated storage failure"):
        merge_people(
            MergeRequest(source_id=source.id, target_id=target.id, user_id=OWNER),
            unit_of_work_factory=sqlite_unit_of_work,
        )

    assert {edge.id for edge in _edges_of(sqlite_unit_of_work, source.id)} == before
    assert _edges_of(sqlite_unit_of_work, target.id) == []
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.people.get(source.id) is not None
    assert _count(sqlite_unit_of_work, MergeRecord) == 0


@pytest.mark.integration
def test_blocked_merge_leaves_store_untouched(sqlite_unit_of_work: UowFactory) -> None:
    source, target, spouse = make_person(is_protected=True), make_person(), make_person("X")
    persist(sqlite_unit_of_work, source, target, spouse, married(source, spouse))

    with pytest.raises(MergeBlockedError, match="profile person"):
        merge_people(
            MergeRequest(source_id=source.id, target_id=target.id, user_id=OWNER),
            unit_of_work_factory=sqlite_unit_of_work,
        )

    assert len(_edges_of(sqlite_unit_of_work, source.id)) == 1
    assert _count(sqlite_unit_of_work, Person) == 3
    assert _count(sqlite_unit_of_work, MergeRecord) == 0


@pytest.mark.integration
def test_preview_reports_conflicts_without_writing(sqlite_unit_of_work: UowFactory) -> None:
    source, target = make_person(), make_person()
    dad, other_dad = make_person("Dad"), make_person("Other")
    persist(
        sqlite_unit_of_work,
        source,
        target,
        dad,
        other_dad,
        father_of(dad, source),
        father_of(other_dad, target),
    )

    preview = preview_person_merge(
        source.id, target.id, OWNER, unit_of_work_factory=sqlite_unit_of_work
    )

    assert preview.can_merge
    assert [role.value for role in preview.conflict_fields] == ["father"]
    assert len(_edges_of(sqlite_unit_of_work, source.id)) == 1


@pytest.mark.integration
def test_merge_of_a_well_connected_person_stays_within_time_bounds(
    sqlite_unit_of_work: UowFactory,
) -> None:
    source, target = make_person(), make_person()
    mum, dad = make_person("Mum"), make_person("Dad")
    children = [make_person(f"Child {index}") for index in range(30)]
    spouses = [make_person(f"Spouse {index}") for index in range(18)]
    edges = [
        mother_of(mum, source),
        father_of(dad, source),
        *(mother_of(source, child) for child in children),
        *(married(source, spouse) for spouse in spouses),
        married(target, spouses[0]),
    ]
    persist(sqlite_unit_of_work, source, target, mum, dad, *children, *spouses, *edges)
    assert len(_edges_of(sqlite_unit_of_work, source.id)) == 50

    started = time.perf_counter()
    preview = preview_person_merge(
        source.id, target.id, OWNER, unit_of_work_factory=sqlite_unit_of_work
    )
    preview_seconds = time.perf_counter() - started

    started = time.perf_counter()
    result = merge_people(
        MergeRequest(source_id=source.id, target_id=target.id, user_id=OWNER),
        unit_of_work_factory=sqlite_unit_of_work,
    )
    merge_seconds = time.perf_counter() - started

    assert preview.can_merge
    assert len(preview.relationships_to_transfer) == 50
    assert preview_seconds < 0.5
    assert merge_seconds < 2.0
    assert result.relationships_transferred == 49
    assert result.relationships_deduplicated == 1
    assert _edges_of(sqlite_unit_of_work, source.id) == []
    assert len(_edges_of(sqlite_unit_of_work, target.id)) == 50
