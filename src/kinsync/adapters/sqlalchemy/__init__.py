"""SQLAlchemy adapter package for kinsync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyMergeRecordRepository,
    SqlAlchemyPersonRepository,
    SqlAlchemyRelationshipRepository,
)
from .unit_of_work import SqlAlchemyPeopleUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyMergeRecordRepository",
    "SqlAlchemyPeopleUnitOfWork",
    "SqlAlchemyPersonRepository",
    "SqlAlchemyRelationshipRepository",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
