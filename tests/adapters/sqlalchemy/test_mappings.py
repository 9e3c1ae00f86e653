from __future__ import annotations

import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kinsync.adapters.sqlalchemy import start_mappers
from kinsync.adapters.sqlalchemy.mappings import create_all_tables
from kinsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyMergeRecordRepository,
    SqlAlchemyPersonRepository,
    SqlAlchemyRelationshipRepository,
)
from kinsync.domain.model import Gender, MergeRecord, ParentRole, Relationship
from tests.helpers.people import father_of, make_person, married, mother_of


def test_start_mappers_is_idempotent() -> None:
    first = start_mappers()
    second = start_mappers()

    assert first is second


def test_create_all_tables_registers_person_graph() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    create_all_tables(engine)

    inspector = inspect(engine)
    assert {"person", "relationship", "merge_record"} <= set(inspector.get_table_names())
    index_names = {index["name"] for index in inspector.get_indexes("relationship")}
    assert {"uq_relationship_parent_role", "uq_relationship_spouse_pair"} <= index_names
    engine.dispose()


def test_person_round_trip_stores_enum_values(sqlite_session: Session) -> None:
    person = make_person("Grace", "Hopper", gender=Gender.FEMALE, birth_date="1906-12-09")
    person_id = person.id
    sqlite_session.add(person)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    raw_gender = sqlite_session.execute(text("SELECT gender FROM person")).scalar_one()
    loaded = SqlAlchemyPersonRepository(sqlite_session).get(person_id)

    assert raw_gender == "female"
    assert loaded is not None
    assert loaded.full_name == "Grace Hopper"
    assert loaded.gender is Gender.FEMALE
    assert loaded.is_protected is False


def test_child_cannot_have_two_fathers(sqlite_session: Session) -> None:
    child, dad, other = make_person("Child"), make_person("Dad"), make_person("Other")
    sqlite_session.add_all([child, dad, other, father_of(dad, child)])
    sqlite_session.commit()

    sqlite_session.add(father_of(other, child))
    with pytest.raises(IntegrityError):
        sqlite_session.commit()
    sqlite_session.rollback()


def test_father_and_mother_may_share_a_child(sqlite_session: Session) -> None:
    child, dad, mum = make_person("Child"), make_person("Dad"), make_person("Mum")
    sqlite_session.add_all([child, dad, mum, father_of(dad, child), mother_of(mum, child)])
    sqlite_session.commit()

    edges = SqlAlchemyRelationshipRepository(sqlite_session).for_person(child.id)

    assert {edge.parent_role for edge in edges} == {ParentRole.FATHER, ParentRole.MOTHER}


def test_spouse_pair_is_unique(sqlite_session: Session) -> None:
    first, second = make_person("First"), make_person("Second")
    sqlite_session.add_all([first, second, married(first, second)])
    sqlite_session.commit()

    sqlite_session.add(married(second, first))
    with pytest.raises(IntegrityError):
        sqlite_session.commit()
    sqlite_session.rollback()


def test_relationship_repository_lists_and_deletes_edges(sqlite_session: Session) -> None:
    repository = SqlAlchemyRelationshipRepository(sqlite_session)
    person, spouse, child = make_person(), make_person("Spouse"), make_person("Child")
    sqlite_session.add_all([person, spouse, child])
    spouse_edge = married(person, spouse)
    parent_edge = mother_of(person, child)
    repository.add(spouse_edge)
    repository.add(parent_edge)
    sqlite_session.commit()

    assert {edge.id for edge in repository.for_person(person.id)} == {
        spouse_edge.id,
        parent_edge.id,
    }

    repository.delete(spouse_edge)

    remaining = sqlite_session.execute(text("SELECT COUNT(*) FROM relationship")).scalar_one()
    assert remaining == 1
    assert repository.for_person(spouse.id) == []
    assert isinstance(repository.for_person(child.id)[0], Relationship)


def test_merge_records_are_listed_per_target(sqlite_session: Session) -> None:
    repository = SqlAlchemyMergeRecordRepository(sqlite_session)
    target = make_person()
    record = MergeRecord(
        source_id=make_person().id,
        target_id=target.id,
        owner_id=target.owner_id,
        relationships_transferred=3,
    )
    repository.add(record)
    sqlite_session.commit()

    (loaded,) = repository.for_target(target.id)

    assert loaded.relationships_transferred == 3
    assert loaded.created_at.tzinfo is not None
    assert repository.for_target(make_person().id) == []
