"""Edit proposals against approved persons.

An approved person stays public while edits queue up behind it. Each edit is reviewed
on its own; approving one copies its payload onto the person and reaffirms the person
as approved. Periods are out of reach of a payload, so no coverage check runs here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chronicler.domain.content import utc_now
from chronicler.domain.errors import InvalidAttribute, NotFound
from chronicler.domain.lifecycle import LifecycleTransitionPolicy, SideEffect, Transition
from chronicler.domain.model import ContentStatus, EntityKind, PersonEdit
from chronicler.domain.ports.notifications import (
    NotificationEvent,
    NotificationKind,
    notify_safely,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from uuid import UUID

    from chronicler.domain.model import Actor, Person, PersonId, PersonPatch, ReviewAction
    from chronicler.domain.ports.notifications import Notifier
    from chronicler.domain.ports.unit_of_work import ContentUnitOfWork

log = logging.getLogger(__name__)

_EDIT_REVIEW_NOTIFICATIONS = {
    ContentStatus.APPROVED: NotificationKind.EDIT_REVIEWED_APPROVED,
    ContentStatus.REJECTED: NotificationKind.EDIT_REVIEWED_REJECTED,
}


class EditProposalManager:
    """Queue, review and apply ``PersonEdit`` proposals."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], ContentUnitOfWork],
        *,
        policy: LifecycleTransitionPolicy | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._policy = policy or LifecycleTransitionPolicy()
        self._notifier = notifier
        self._clock = clock

    def propose_edit(self, person_id: PersonId, payload: PersonPatch, actor: Actor) -> PersonEdit:
        """Queue ``payload``, trimmed like any other person write, as a pending edit."""

        now = self._clock()
        with self._uow_factory() as uow:
            person = uow.repositories.persons.get(person_id)
            if person is None:
                raise NotFound(f"Person '{person_id}' not found", details={"person_id": person_id})
            self._policy.decide(
                EntityKind.PERSON,
                Transition.PROPOSE_EDIT,
                current=person.status,
                actor=actor,
                owner_id=person.created_by,
            )
            patch = payload.normalized(person.merged_with(payload).validated())
            if patch.is_empty:
                raise InvalidAttribute("Edit payload changes nothing", field="payload")

            self._policy.decide(
                EntityKind.PERSON_EDIT, Transition.CREATE_SUBMISSION, current=None, actor=actor
            )
            edit = PersonEdit(
                person_id=person_id,
                proposer_user_id=actor.id,
                payload=patch,
                status=ContentStatus.PENDING,
                created_at=now,
            )
            uow.repositories.edits.add(edit)
            uow.commit()

        log.info("Queued edit %s for %s by user %s", edit.id, person_id, actor.id)
        self._notify(NotificationKind.EDIT_PROPOSED, person, actor)
        return edit

    def review_edit(
        self,
        edit_id: UUID,
        action: ReviewAction,
        reviewer: Actor,
        comment: str | None = None,
    ) -> PersonEdit:
        """Approve (and apply) or reject a pending edit."""

        now = self._clock()
        with self._uow_factory() as uow:
            edit = uow.repositories.edits.get(edit_id)
            if edit is None:
                raise NotFound(f"Edit '{edit_id}' not found", details={"edit_id": str(edit_id)})
            decision = self._policy.decide(
                EntityKind.PERSON_EDIT,
                self._policy.review_transition(action),
                current=edit.status,
                actor=reviewer,
            )
            person = uow.repositories.persons.get(edit.person_id)
            if person is None:
                raise NotFound(
                    f"Person '{edit.person_id}' not found",
                    details={"person_id": edit.person_id},
                )

            target = decision.target or edit.status
            edit.record_review(target, reviewer=reviewer.id, comment=comment, at=now)
            if decision.has(SideEffect.APPLY_EDIT):
                person.apply_patch(edit.payload)
                person.updated_by = reviewer.id
                person.move_to(ContentStatus.APPROVED, at=now)
            uow.commit()

        log.info(
            "Reviewed edit %s of %s: %s by user %s",
            edit_id,
            edit.person_id,
            edit.status,
            reviewer.id,
        )
        self._notify(_EDIT_REVIEW_NOTIFICATIONS[edit.status], person, reviewer)
        return edit

    def pending_edits(self) -> list[PersonEdit]:
        """Edits waiting for review, oldest first."""

        with self._uow_factory() as uow:
            return uow.repositories.edits.list_by_status(ContentStatus.PENDING)

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


__all__ = ["EditProposalManager"]
