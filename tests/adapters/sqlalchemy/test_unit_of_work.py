from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, text

from chronicler.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyContentUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from chronicler.domain.errors import Conflict
from chronicler.domain.model import Period, Person

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def _person(person_id: str = "ada-lovelace") -> Person:
    return Person(
        id=person_id,
        name="Ada Lovelace",
        birth_year=1815,
        death_year=1852,
        category="science",
        created_by=1,
    )


def test_sqlalchemy_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyContentUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert is_started()


def test_startup_from_database_uri_migrates_schema() -> None:
    startup(database_uri="sqlite+pysqlite:///:memory:", force=True)

    engine = configured_engine()
    assert engine is not None
    with engine.connect() as connection:
        tables = {
            row[0]
            for row in connection.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
        }
    assert {"person", "period", "achievement", "person_edit", "alembic_version"} <= tables


def test_session_is_only_available_inside_the_block(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyContentUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories

    with uow:
        assert uow.repositories.persons.get("missing") is None

    with pytest.raises(StartupError):
        _ = uow.session


def test_unit_of_work_persists_on_commit(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyContentUnitOfWork() as uow:
        uow.repositories.persons.add(_person())
        uow.commit()

    with SqlAlchemyContentUnitOfWork() as uow:
        stored = uow.repositories.persons.get("ada-lovelace")
        assert stored is not None
        assert stored.name == "Ada Lovelace"


def test_leaving_without_commit_discards_changes(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyContentUnitOfWork() as uow:
        uow.repositories.persons.add(_person())
        uow.flush()

    with SqlAlchemyContentUnitOfWork() as uow:
        assert uow.repositories.persons.get("ada-lovelace") is None


def test_exception_rolls_back_and_propagates(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError, match="boom"), SqlAlchemyContentUnitOfWork() as uow:
        uow.repositories.persons.add(_person())
        uow.flush()
        raise RuntimeError("boom")

    with SqlAlchemyContentUnitOfWork() as uow:
        assert uow.repositories.persons.get("ada-lovelace") is None


def test_duplicate_identifier_surfaces_as_conflict(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    with SqlAlchemyContentUnitOfWork() as uow:
        uow.repositories.persons.add(_person())
        uow.commit()

    with pytest.raises(Conflict) as exc, SqlAlchemyContentUnitOfWork() as uow:
        uow.repositories.persons.add(_person())
        uow.commit()

    assert exc.value.__cause__ is not None
    assert exc.value.to_dict()["kind"] == "conflict"


def test_foreign_keys_are_enforced(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(Conflict), SqlAlchemyContentUnitOfWork() as uow:
        uow.repositories.periods.add(
            Period(person_id="nobody", country_id=1, start_year=1900, end_year=1950)
        )
        uow.commit()


def test_lifespan_check_constraint_is_enforced(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    inverted = _person()
    inverted.birth_year = 1900

    with pytest.raises(Conflict), SqlAlchemyContentUnitOfWork() as uow:
        uow.repositories.persons.add(inverted)
        uow.commit()
