"""SQLAlchemy-backed unit of work for conference reconciliation.

The adapter keeps one process-wide engine. ``startup`` binds it (creating it
from ``DATABASE_URI`` when none is given) and brings the schema to the latest
migration; every ``SqlAlchemyUnitOfWork`` then opens one ORM session, which is
one transaction. An error inside the ``with`` block rolls back; a clean exit
without ``commit`` closes the session, which discards pending writes but
leaves what was read loaded on the now detached instances.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from cfpsync.adapters.sqlalchemy.mappings import start_mappers
from cfpsync.adapters.sqlalchemy.migrations import upgrade_head
from cfpsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyConferenceRepository,
    SqlAlchemyConferenceSecretRepository,
    SqlAlchemyEmailIndexRepository,
    SqlAlchemyPersonRepository,
    SqlAlchemySessionRepository,
    SqlAlchemyTrackRepository,
)
from cfpsync.config.storage import get_database_config
from cfpsync.domain.ports.unit_of_work import ConferenceRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """The storage adapter is not bound to a database, or a session is misused."""


@dataclass(slots=True)
class _EngineRegistry:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = field(default=None, repr=False)

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def release(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.sessions = None

    def open_session(self) -> Session:
        if self.sessions is None:
            raise StartupError("no database bound; call unit_of_work.startup() first")
        return self.sessions()


_REGISTRY = _EngineRegistry()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to ``engine`` (or a new one) and migrate its schema."""

    if _REGISTRY.engine is not None:
        if not force:
            raise StartupError("database already bound; pass force=True to rebind")
        _REGISTRY.release()

    bound = engine if engine is not None else create_engine(
        database_uri or get_database_config().uri, future=True
    )
    start_mappers()
    upgrade_head(engine=bound)
    _REGISTRY.bind(bound)


def configured_engine() -> Engine | None:
    return _REGISTRY.engine


def is_started() -> bool:
    return _REGISTRY.engine is not None


def shutdown() -> None:
    """Dispose the bound engine; mostly useful between tests."""

    _REGISTRY.release()


class SqlAlchemyUnitOfWork:
    """One transaction over every repository the importer and reset need."""

    def __init__(self) -> None:
        if not is_started():
            raise StartupError("no database bound; call unit_of_work.startup() first")
        self._session: Session | None = None
        self._repositories: ConferenceRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("unit of work is already open")
        session = _REGISTRY.open_session()
        self._session = session
        self._repositories = ConferenceRepositories(
            conferences=SqlAlchemyConferenceRepository(session),
            secrets=SqlAlchemyConferenceSecretRepository(session),
            persons=SqlAlchemyPersonRepository(session),
            email_index=SqlAlchemyEmailIndexRepository(session),
            sessions=SqlAlchemySessionRepository(session),
            tracks=SqlAlchemyTrackRepository(session),
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
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("unit of work is not open")
        return self._session

    @property
    def repositories(self) -> ConferenceRepositories:
        if self._repositories is None:
            raise StartupError("unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
