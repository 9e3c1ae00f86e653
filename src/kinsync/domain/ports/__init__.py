"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    MergeRecordRepository,
    PersonRepository,
    RelationshipRepository,
    Repository,
)
from .preview import PreviewRepository
from .unit_of_work import (
    PeopleRepositories,
    PeopleUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "MergeRecordRepository",
    "PeopleRepositories",
    "PeopleUnitOfWork",
    "PersonRepository",
    "PreviewRepository",
    "RelationshipRepository",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
]
