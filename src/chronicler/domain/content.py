"""Application service applying lifecycle transitions to persons and their dependents.

Every public operation runs inside exactly one unit of work. All checks (policy,
attribute validation, interval normalization) happen before the first mutation, so a
rejected request never leaves a partial write behind; anything that fails later is
rolled back by the unit of work.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from chronicler.domain.errors import EmptyIntervalSet, InvalidAttribute, NotFound
from chronicler.domain.intervals import intervals_of, normalize_life_periods
from chronicler.domain.lifecycle import (
    LifecycleTransitionPolicy,
    SideEffect,
    Transition,
    cascade_statuses,
)
from chronicler.domain.model import (
    Achievement,
    ContentStatus,
    EntityKind,
    Period,
    PeriodType,
    Person,
    ReviewAction,
    person_slug,
)
from chronicler.domain.ports.notifications import (
    NotificationEvent,
    NotificationKind,
    notify_safely,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from chronicler.domain.intervals import LifeInterval, RawInterval
    from chronicler.domain.lifecycle import TransitionDecision
    from chronicler.domain.model import (
        Actor,
        CountryId,
        PersonAttributes,
        PersonId,
        PersonPatch,
        Year,
    )
    from chronicler.domain.ports.notifications import Notifier
    from chronicler.domain.ports.unit_of_work import ContentUnitOfWork

    type Clock = Callable[[], datetime]

log = logging.getLogger(__name__)

# rejected life periods are history, not part of the partition
_LIVE_STATUSES = (ContentStatus.DRAFT, ContentStatus.PENDING, ContentStatus.APPROVED)

_REVIEW_NOTIFICATIONS = {
    ContentStatus.APPROVED: NotificationKind.PERSON_REVIEWED_APPROVED,
    ContentStatus.REJECTED: NotificationKind.PERSON_REVIEWED_REJECTED,
}


def utc_now() -> datetime:
    return datetime.now(UTC)


class ContentRepository:
    """Moderated writes and reads for persons, their periods and achievements."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], ContentUnitOfWork],
        *,
        policy: LifecycleTransitionPolicy | None = None,
        notifier: Notifier | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._policy = policy or LifecycleTransitionPolicy()
        self._notifier = notifier
        self._clock = clock

    # Writes -------------------------------------------------------------------

    def create_draft_or_submission(
        self,
        attributes: PersonAttributes,
        life_periods: Sequence[RawInterval] | None,
        actor: Actor,
        *,
        save_as_draft: bool,
    ) -> Person:
        """Create (or upsert) a person as a draft, a submission or, for moderators, approved.

        Anything but a draft needs at least one life period.
        """

        transition = self._policy.creation_transition(actor, save_as_draft=save_as_draft)
        if transition is not Transition.CREATE_DRAFT and not life_periods:
            raise EmptyIntervalSet(
                "At least one life period is required to submit a person",
                field="life_periods",
            )
        return self._write_person(attributes, life_periods, actor, transition=transition)

    def publish(
        self,
        attributes: PersonAttributes,
        actor: Actor,
        *,
        person_id: PersonId | None = None,
    ) -> Person:
        """Moderator upsert straight into ``approved``; stored periods are left alone."""

        return self._write_person(
            attributes, None, actor, transition=Transition.PUBLISH, person_id=person_id
        )

    def update_draft(
        self,
        person_id: PersonId,
        patch: PersonPatch,
        life_periods: Sequence[RawInterval] | None,
        actor: Actor,
    ) -> Person:
        """Patch a draft and optionally replace its life periods (kept as drafts)."""

        if patch.is_empty and life_periods is None:
            raise InvalidAttribute("Nothing to update", field="patch")

        now = self._clock()
        with self._uow_factory() as uow:
            person = self._require_person(uow, person_id)
            self._policy.decide(
                EntityKind.PERSON,
                Transition.UPDATE_DRAFT,
                current=person.status,
                actor=actor,
                owner_id=person.created_by,
            )
            merged = person.merged_with(patch).validated()
            normalized = (
                normalize_life_periods(
                    life_periods, birth_year=merged.birth_year, death_year=merged.death_year
                )
                if life_periods is not None
                else None
            )

            person.assign(merged)
            person.updated_by = actor.id
            person.updated_at = now
            if normalized is not None:
                _replace_life_periods(
                    uow, person, normalized, status=ContentStatus.DRAFT, actor=actor, at=now
                )
            uow.commit()

        log.info("Updated draft %s by user %s", person_id, actor.id)
        return person

    def submit(self, person_id: PersonId, actor: Actor) -> Person:
        """Send the owner's draft to moderation, together with its draft dependents."""

        now = self._clock()
        with self._uow_factory() as uow:
            person = self._require_person(uow, person_id)
            decision = self._policy.decide(
                EntityKind.PERSON,
                Transition.SUBMIT,
                current=person.status,
                actor=actor,
                owner_id=person.created_by,
            )
            life = uow.repositories.periods.list_for_person(
                person_id, period_type=PeriodType.LIFE, statuses=_LIVE_STATUSES
            )
            if decision.has(SideEffect.VALIDATE_COVERAGE):
                normalized = normalize_life_periods(
                    intervals_of(life),
                    birth_year=person.birth_year,
                    death_year=person.death_year,
                )
                if len(life) == 1:
                    life[0].start_year = normalized[0].start_year
                    life[0].end_year = normalized[0].end_year

            self._apply(uow, person, decision, at=now)
            uow.commit()

        log.info("Submitted %s for review by user %s", person_id, actor.id)
        self._notify(NotificationKind.PERSON_SUBMITTED, person, actor)
        return person

    def revert_to_draft(self, person_id: PersonId, actor: Actor) -> Person:
        """Withdraw a pending submission back to draft."""

        now = self._clock()
        with self._uow_factory() as uow:
            person = self._require_person(uow, person_id)
            decision = self._policy.decide(
                EntityKind.PERSON,
                Transition.REVERT,
                current=person.status,
                actor=actor,
                owner_id=person.created_by,
            )
            self._apply(uow, person, decision, at=now)
            uow.commit()

        log.info("Reverted %s to draft by user %s", person_id, actor.id)
        return person

    def review(
        self,
        person_id: PersonId,
        action: ReviewAction,
        reviewer: Actor,
        comment: str | None = None,
    ) -> Person:
        """Approve or reject a pending person. Dependents keep their own status."""

        now = self._clock()
        with self._uow_factory() as uow:
            person = self._require_person(uow, person_id)
            decision = self._policy.decide(
                EntityKind.PERSON,
                self._policy.review_transition(action),
                current=person.status,
                actor=reviewer,
            )
            self._apply(uow, person, decision, at=now)
            person.record_review(reviewer=reviewer.id, comment=comment, at=now)
            uow.commit()

        log.info("Reviewed %s: %s by user %s", person_id, person.status, reviewer.id)
        self._notify(_REVIEW_NOTIFICATIONS[person.status], person, reviewer)
        return person

    def replace_life_periods(
        self,
        person_id: PersonId,
        periods: Sequence[RawInterval],
        actor: Actor,
    ) -> list[Period]:
        """Replace the life-period set, validated against the stored lifespan.

        Moderators write approved periods; contributors (owners only) write pending
        ones. The person's own status is never touched.
        """

        now = self._clock()
        with self._uow_factory() as uow:
            person = self._require_person(uow, person_id)
            self._policy.decide(
                EntityKind.PERSON,
                Transition.REPLACE_LIFE_PERIODS,
                current=person.status,
                actor=actor,
                owner_id=person.created_by,
            )
            normalized = normalize_life_periods(
                periods, birth_year=person.birth_year, death_year=person.death_year
            )
            status = ContentStatus.APPROVED if actor.is_moderator else ContentStatus.PENDING
            written = _replace_life_periods(
                uow, person, normalized, status=status, actor=actor, at=now
            )
            uow.commit()

        log.info(
            "Replaced %d life periods of %s (%s) by user %s",
            len(written),
            person_id,
            status,
            actor.id,
        )
        return written

    def add_achievement(
        self,
        person_id: PersonId,
        year: Year,
        description: str,
        actor: Actor,
        *,
        save_as_draft: bool = False,
        country_id: CountryId | None = None,
        wikipedia_url: str | None = None,
        image_url: str | None = None,
    ) -> Achievement:
        """Attach an achievement dated within the person's lifespan."""

        text = description.strip()
        if not text:
            raise InvalidAttribute("Description must not be blank", field="description")

        now = self._clock()
        transition = self._policy.creation_transition(actor, save_as_draft=save_as_draft)
        with self._uow_factory() as uow:
            person = self._require_person(uow, person_id)
            if isinstance(year, bool) or not isinstance(year, int):
                raise InvalidAttribute("year must be an integer year", field="year")
            if not person.birth_year <= year <= person.death_year:
                raise InvalidAttribute(
                    f"Year {year} is outside the lifespan "
                    f"{person.birth_year}-{person.death_year}",
                    field="year",
                )
            decision = self._policy.decide(
                EntityKind.ACHIEVEMENT, transition, current=None, actor=actor
            )
            achievement = Achievement(
                person_id=person_id,
                year=year,
                description=text,
                country_id=country_id,
                wikipedia_url=wikipedia_url or None,
                image_url=image_url or None,
                created_by=actor.id,
                created_at=now,
            )
            achievement.move_to(_require_target(decision), at=now)
            uow.repositories.achievements.add(achievement)
            uow.commit()

        log.info(
            "Added achievement %s to %s (%s) by user %s",
            achievement.id,
            person_id,
            achievement.status,
            actor.id,
        )
        return achievement

    def delete_draft(self, person_id: PersonId, actor: Actor) -> None:
        """Remove the owner's draft with every period and achievement attached to it."""

        with self._uow_factory() as uow:
            person = self._require_person(uow, person_id)
            self._policy.decide(
                EntityKind.PERSON,
                Transition.DELETE_DRAFT,
                current=person.status,
                actor=actor,
                owner_id=person.created_by,
            )
            repositories = uow.repositories
            for period in repositories.periods.list_for_person(person_id):
                repositories.periods.delete(period)
            for achievement in repositories.achievements.list_for_person(person_id):
                repositories.achievements.delete(achievement)
            uow.flush()
            repositories.persons.delete(person)
            uow.commit()

        log.info("Deleted draft %s by user %s", person_id, actor.id)

    # Reads ----------------------------------------------------------------------

    def get_person(self, person_id: PersonId) -> Person:
        with self._uow_factory() as uow:
            return self._require_person(uow, person_id)

    def life_periods(self, person_id: PersonId) -> list[Period]:
        with self._uow_factory() as uow:
            self._require_person(uow, person_id)
            return uow.repositories.periods.list_for_person(
                person_id, period_type=PeriodType.LIFE
            )

    def moderation_queue(self) -> list[Person]:
        """Persons waiting for review, oldest submission first."""

        with self._uow_factory() as uow:
            return uow.repositories.persons.list_by_status(ContentStatus.PENDING)

    def drafts_of(self, actor: Actor) -> list[Person]:
        with self._uow_factory() as uow:
            return uow.repositories.persons.list_by_owner(actor.id, status=ContentStatus.DRAFT)

    # Internals ------------------------------------------------------------------

    def _write_person(
        self,
        attributes: PersonAttributes,
        life_periods: Sequence[RawInterval] | None,
        actor: Actor,
        *,
        transition: Transition,
        person_id: PersonId | None = None,
    ) -> Person:
        attrs = attributes.validated()
        resolved_id = person_id or person_slug(attrs.name)
        if not resolved_id:
            raise InvalidAttribute(
                f"Cannot derive an identifier from name {attrs.name!r}", field="name"
            )
        normalized = (
            normalize_life_periods(
                life_periods, birth_year=attrs.birth_year, death_year=attrs.death_year
            )
            if life_periods is not None
            else None
        )

        now = self._clock()
        with self._uow_factory() as uow:
            existing = uow.repositories.persons.get(resolved_id)
            decision = self._policy.decide(
                EntityKind.PERSON,
                transition,
                current=existing.status if existing is not None else None,
                actor=actor,
                owner_id=existing.created_by if existing is not None else None,
            )
            if existing is None:
                person = Person(
                    id=resolved_id,
                    created_by=actor.id,
                    created_at=now,
                    **_fields(attrs),  # pyright: ignore[reportArgumentType]
                )
                uow.repositories.persons.add(person)
                # periods reference the row, which has no mapped relationship to order by
                uow.flush()
            else:
                person = existing
                person.assign(attrs)
                person.updated_by = actor.id

            if normalized is not None:
                _replace_life_periods(
                    uow, person, normalized, status=_require_target(decision), actor=actor, at=now
                )
            self._apply(uow, person, decision, at=now)
            uow.commit()

        log.info(
            "%s %s as %s by user %s",
            "Created" if existing is None else "Upserted",
            resolved_id,
            person.status,
            actor.id,
        )
        if decision.has(SideEffect.NOTIFY):
            self._notify(NotificationKind.PERSON_CREATED, person, actor)
        return person

    def _apply(
        self,
        uow: ContentUnitOfWork,
        person: Person,
        decision: TransitionDecision,
        *,
        at: datetime,
    ) -> None:
        """Move ``person`` to the decided status and run the decided cascade."""

        if decision.target is not None:
            person.move_to(decision.target, at=at)
        movement = decision.cascade
        if movement is None:
            return
        repositories = uow.repositories
        periods = repositories.periods.list_for_person(person.id, statuses=(movement[0],))
        achievements = repositories.achievements.list_for_person(
            person.id, statuses=(movement[0],)
        )
        moved = [
            *cascade_statuses(periods, movement, at=at),
            *cascade_statuses(achievements, movement, at=at),
        ]
        log.debug("Cascaded %d dependents of %s to %s", len(moved), person.id, movement[1])

    def _require_person(self, uow: ContentUnitOfWork, person_id: PersonId) -> Person:
        person = uow.repositories.persons.get(person_id)
        if person is None:
            raise NotFound(f"Person '{person_id}' not found", details={"person_id": person_id})
        return person

    def _notify(self, kind: NotificationKind, person: Person, actor: Actor) -> None:
        notify_safely(
            self._notifier,
            NotificationEvent(
                kind=kind,
                person_name=person.name,
                actor_email=actor.email,
                person_id=person.id,
            ),
        )


def _fields(attributes: PersonAttributes) -> dict[str, object]:
    return {
        "name": attributes.name,
        "birth_year": attributes.birth_year,
        "death_year": attributes.death_year,
        "category": attributes.category,
        "description": attributes.description,
        "image_url": attributes.image_url,
        "wiki_link": attributes.wiki_link,
    }


def _require_target(decision: TransitionDecision) -> ContentStatus:
    if decision.target is None:
        raise RuntimeError(f"Transition {decision.transition} does not define a status")
    return decision.target


def _replace_life_periods(
    uow: ContentUnitOfWork,
    person: Person,
    intervals: Iterable[LifeInterval],
    *,
    status: ContentStatus,
    actor: Actor,
    at: datetime,
) -> list[Period]:
    """Swap the person's whole life-period set for ``intervals``."""

    periods = uow.repositories.periods
    for stale in periods.list_for_person(person.id, period_type=PeriodType.LIFE):
        periods.delete(stale)
    uow.flush()

    written: list[Period] = []
    for interval in intervals:
        period = Period(
            person_id=person.id,
            country_id=interval.country_id,
            start_year=interval.start_year,
            end_year=interval.end_year,
            period_type=PeriodType.LIFE,
            created_by=actor.id,
            created_at=at,
        )
        period.move_to(status, at=at)
        periods.add(period)
        written.append(period)
    return written


__all__ = ["ContentRepository", "utc_now"]
