"""Outbound notification port.

Delivery is someone else's job; the engine only hands over an event after a
successful commit and never lets a notifier failure reach the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from chronicler.domain.model import PersonId

log = logging.getLogger(__name__)


class NotificationKind(StrEnum):
    PERSON_CREATED = "person_created"
    PERSON_SUBMITTED = "person_submitted"
    PERSON_REVIEWED_APPROVED = "person_reviewed_approved"
    PERSON_REVIEWED_REJECTED = "person_reviewed_rejected"
    EDIT_PROPOSED = "edit_proposed"
    EDIT_REVIEWED_APPROVED = "edit_reviewed_approved"
    EDIT_REVIEWED_REJECTED = "edit_reviewed_rejected"


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    kind: NotificationKind
    person_name: str
    actor_email: str | None
    person_id: PersonId


@runtime_checkable
class Notifier(Protocol):
    """Receives events on the committing thread, after the transaction is closed.

    Implementations should return quickly; slow delivery belongs behind
    ``chronicler.adapters.notifications.BackgroundNotifier``.
    """

    def notify(self, event: NotificationEvent) -> None: ...


def notify_safely(notifier: Notifier | None, event: NotificationEvent) -> None:
    """Hand ``event`` to ``notifier``; failures are logged and dropped."""

    if notifier is None:
        return
    try:
        notifier.notify(event)
    except Exception:  # noqa: BLE001
        log.warning("Notifier failed for %s on %s", event.kind, event.person_id, exc_info=True)
