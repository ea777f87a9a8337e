"""Ports for persisting moderated content."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from chronicler.domain.model import Achievement, Period, Person, PersonEdit

if TYPE_CHECKING:
    from collections.abc import Collection
    from uuid import UUID

    from chronicler.domain.model import ContentStatus, PeriodType, PersonId, UserId


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def delete(self, entity: TEntity) -> None: ...


@runtime_checkable
class PersonRepository(Repository[Person], Protocol):
    """Persistence contract for persons."""

    def get(self, person_id: PersonId) -> Person | None: ...

    def list_by_status(self, status: ContentStatus) -> list[Person]: ...

    def list_by_owner(
        self, owner_id: UserId, *, status: ContentStatus | None = None
    ) -> list[Person]: ...


@runtime_checkable
class PeriodRepository(Repository[Period], Protocol):
    """Persistence contract for periods."""

    def list_for_person(
        self,
        person_id: PersonId,
        *,
        period_type: PeriodType | None = None,
        statuses: Collection[ContentStatus] | None = None,
    ) -> list[Period]: ...


@runtime_checkable
class AchievementRepository(Repository[Achievement], Protocol):
    """Persistence contract for achievements."""

    def list_for_person(
        self,
        person_id: PersonId,
        *,
        statuses: Collection[ContentStatus] | None = None,
    ) -> list[Achievement]: ...


@runtime_checkable
class PersonEditRepository(Repository[PersonEdit], Protocol):
    """Persistence contract for proposed person edits."""

    def get(self, edit_id: UUID) -> PersonEdit | None: ...

    def list_by_status(self, status: ContentStatus) -> list[PersonEdit]: ...
