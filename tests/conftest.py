from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from chronicler.adapters.sqlalchemy import start_mappers
from chronicler.adapters.sqlalchemy.migrations import upgrade_head
from chronicler.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyContentUnitOfWork,
    enable_sqlite_foreign_keys,
    shutdown,
    startup,
)
from chronicler.domain.content import ContentRepository
from chronicler.domain.edits import EditProposalManager
from tests.helpers.content import RecordingNotifier, SteppingClock

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    enable_sqlite_foreign_keys(engine)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyContentUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyContentUnitOfWork:
        return SqlAlchemyContentUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def content(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentUnitOfWork],
    notifier: RecordingNotifier,
    clock: SteppingClock,
) -> ContentRepository:
    return ContentRepository(sqlite_unit_of_work, notifier=notifier, clock=clock)


@pytest.fixture
def edits(
    sqlite_unit_of_work: Callable[[], SqlAlchemyContentUnitOfWork],
    notifier: RecordingNotifier,
    clock: SteppingClock,
) -> EditProposalManager:
    return EditProposalManager(sqlite_unit_of_work, notifier=notifier, clock=clock)
