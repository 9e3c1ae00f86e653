"""SQLAlchemy-backed unit of work for the person graph.

The adapter is bound once per process with :func:`startup`. Every
:class:`SqlAlchemyPeopleUnitOfWork` then opens one session per ``with`` block,
so a merge reads, rewires and deletes inside a single transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal, Self

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from kinsync.adapters.sqlalchemy.mappings import start_mappers
from kinsync.adapters.sqlalchemy.migrations import upgrade_head
from kinsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyMergeRecordRepository,
    SqlAlchemyPersonRepository,
    SqlAlchemyRelationshipRepository,
)
from kinsync.config import get_database_config
from kinsync.domain.ports.unit_of_work import PeopleRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter or a unit of work is used in the wrong state."""


@dataclass(frozen=True, slots=True)
class _Binding:
    engine: Engine
    sessions: sessionmaker[Session]


_binding: _Binding | None = None


def _require_binding() -> _Binding:
    if _binding is None:
        raise StartupError(
            "SQLAlchemy adapter not initialised. Call kinsync.adapters.sqlalchemy."
            "unit_of_work.startup() before requesting a unit of work."
        )
    return _binding


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to ``engine`` (or one built from config) and migrate it."""

    global _binding  # noqa: PLW0603
    if _binding is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        database = get_database_config()
        engine = create_engine(database_uri or database.uri, echo=database.echo, future=True)
    log.info("Starting SQLAlchemy adapter on %s", engine.url.render_as_string(hide_password=True))
    start_mappers()
    upgrade_head(engine=engine)
    _binding = _Binding(engine=engine, sessions=sessionmaker(bind=engine, expire_on_commit=False))


def is_started() -> bool:
    return _binding is not None


def shutdown() -> None:
    """Dispose the bound engine; a no-op when nothing is bound."""

    global _binding  # noqa: PLW0603
    if _binding is not None:
        log.debug("Disposing SQLAlchemy engine")
        _binding.engine.dispose()
    _binding = None


class SqlAlchemyPeopleUnitOfWork:
    """Session scope over people, relationships and merge records.

    Leaving the block closes the session. An exception rolls it back first, so
    nothing written before the failure survives.
    """

    def __init__(self) -> None:
        self._sessions = _require_binding().sessions
        self._session: Session | None = None
        self._repositories: PeopleRepositories | None = None

    def __enter__(self) -> Self:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        session = self._sessions()
        self._session = session
        self._repositories = PeopleRepositories(
            people=SqlAlchemyPersonRepository(session),
            relationships=SqlAlchemyRelationshipRepository(session),
            merges=SqlAlchemyMergeRecordRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                log.debug("Rolling back unit of work after %s", exc_type.__name__)
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> PeopleRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session


if TYPE_CHECKING:
    from kinsync.domain.ports.unit_of_work import PeopleUnitOfWork

    _uow_people_check: PeopleUnitOfWork = SqlAlchemyPeopleUnitOfWork()
