"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select

from chronicler.adapters.sqlalchemy.mappings import (
    achievement_table,
    period_table,
    person_edit_table,
    person_table,
)
from chronicler.domain.model import Achievement, Period, Person, PersonEdit

if TYPE_CHECKING:
    from collections.abc import Collection
    from uuid import UUID

    from sqlalchemy.orm import Session

    from chronicler.domain.model import ContentStatus, PeriodType, PersonId, UserId


class SqlAlchemyRepository[TEntity]:
    """Shared add/delete for session-backed repositories."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def delete(self, entity: TEntity) -> None:
        self.session.delete(entity)


class SqlAlchemyPersonRepository(SqlAlchemyRepository[Person]):
    def get(self, person_id: PersonId) -> Person | None:
        return self.session.get(Person, person_id)

    def list_by_status(self, status: ContentStatus) -> list[Person]:
        stmt = (
            select(Person)
            .where(person_table.c.status == status)
            .order_by(person_table.c.submitted_at, person_table.c.created_at, person_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def list_by_owner(
        self, owner_id: UserId, *, status: ContentStatus | None = None
    ) -> list[Person]:
        stmt = select(Person).where(person_table.c.created_by == owner_id)
        if status is not None:
            stmt = stmt.where(person_table.c.status == status)
        stmt = stmt.order_by(person_table.c.updated_at.desc(), person_table.c.id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyPeriodRepository(SqlAlchemyRepository[Period]):
    def list_for_person(
        self,
        person_id: PersonId,
        *,
        period_type: PeriodType | None = None,
        statuses: Collection[ContentStatus] | None = None,
    ) -> list[Period]:
        stmt = select(Period).where(period_table.c.person_id == person_id)
        if period_type is not None:
            stmt = stmt.where(period_table.c.period_type == period_type)
        if statuses is not None:
            stmt = stmt.where(period_table.c.status.in_(list(statuses)))
        stmt = stmt.order_by(period_table.c.start_year, period_table.c.end_year)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyAchievementRepository(SqlAlchemyRepository[Achievement]):
    def list_for_person(
        self,
        person_id: PersonId,
        *,
        statuses: Collection[ContentStatus] | None = None,
    ) -> list[Achievement]:
        stmt = select(Achievement).where(achievement_table.c.person_id == person_id)
        if statuses is not None:
            stmt = stmt.where(achievement_table.c.status.in_(list(statuses)))
        stmt = stmt.order_by(achievement_table.c.year)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyPersonEditRepository(SqlAlchemyRepository[PersonEdit]):
    def get(self, edit_id: UUID) -> PersonEdit | None:
        return self.session.get(PersonEdit, edit_id)

    def list_by_status(self, status: ContentStatus) -> list[PersonEdit]:
        stmt = (
            select(PersonEdit)
            .where(person_edit_table.c.status == status)
            .order_by(person_edit_table.c.created_at)
        )
        return list(self.session.execute(stmt).scalars())


if TYPE_CHECKING:
    from chronicler.domain.ports.persistence import (
        AchievementRepository,
        PeriodRepository,
        PersonEditRepository,
        PersonRepository,
    )

    _session_stub = cast("Session", object())
    _person_repo: PersonRepository = SqlAlchemyPersonRepository(_session_stub)
    _period_repo: PeriodRepository = SqlAlchemyPeriodRepository(_session_stub)
    _achievement_repo: AchievementRepository = SqlAlchemyAchievementRepository(_session_stub)
    _edit_repo: PersonEditRepository = SqlAlchemyPersonEditRepository(_session_stub)
