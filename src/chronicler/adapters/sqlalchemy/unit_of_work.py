"""SQLAlchemy-backed unit of work for moderated content."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from chronicler.adapters.sqlalchemy.mappings import start_mappers
from chronicler.adapters.sqlalchemy.migrations import upgrade_head
from chronicler.adapters.sqlalchemy.repositories import (
    SqlAlchemyAchievementRepository,
    SqlAlchemyPeriodRepository,
    SqlAlchemyPersonEditRepository,
    SqlAlchemyPersonRepository,
)
from chronicler.config import get_database_config
from chronicler.domain.errors import ChroniclerError, Conflict, StorageError
from chronicler.domain.ports.unit_of_work import ContentRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call chronicler.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
    _ = connection_record
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on foreign-key enforcement for every SQLite connection of ``engine``."""

    if engine.dialect.name != "sqlite":
        return
    if not event.contains(engine, "connect", _set_sqlite_pragma):
        event.listen(engine, "connect", _set_sqlite_pragma)
    # pooled connections opened before the listener existed
    with engine.connect() as connection:
        connection.exec_driver_sql("PRAGMA foreign_keys=ON")


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, mappers, schema and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine
    if resolved_engine is None:
        config = get_database_config(uri=database_uri)
        resolved_engine = create_engine(config.uri, echo=config.echo, future=True)
    enable_sqlite_foreign_keys(resolved_engine)
    start_mappers()
    upgrade_head(engine=resolved_engine)

    log.debug("SQLAlchemy adapter started on %s", resolved_engine.url)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


def translate_storage_error(exc: SQLAlchemyError) -> ChroniclerError:
    """Map a driver/ORM failure onto the engine's error taxonomy."""

    if isinstance(exc, IntegrityError):
        return Conflict(
            "The change conflicts with existing data",
            details={"statement": exc.statement} if exc.statement else None,
        )
    return StorageError("The content store failed to complete the operation")


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections.

    Leaving the block with an exception rolls back; SQLAlchemy errors are re-raised
    as ``Conflict`` or ``StorageError`` with the original chained.
    """

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            self.session.close()
            self.session = None
        if isinstance(exc_value, SQLAlchemyError):
            log.warning("Rolled back after storage failure: %s", exc_value)
            raise translate_storage_error(exc_value) from exc_value
        return False

    def flush(self) -> None:
        self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyContentUnitOfWork(BaseSqlAlchemyUnitOfWork[ContentRepositories]):
    """Unit of work managing SQLAlchemy sessions for persons, periods and edits."""

    def _build_repositories(self, session: Session) -> ContentRepositories:
        return ContentRepositories(
            persons=SqlAlchemyPersonRepository(session),
            periods=SqlAlchemyPeriodRepository(session),
            achievements=SqlAlchemyAchievementRepository(session),
            edits=SqlAlchemyPersonEditRepository(session),
        )


if TYPE_CHECKING:
    from chronicler.domain.ports.unit_of_work import ContentUnitOfWork

    _uow_check: ContentUnitOfWork = SqlAlchemyContentUnitOfWork()
