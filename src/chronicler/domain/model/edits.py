"""Proposed edits to already-approved persons."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from chronicler.domain.model.content import PersonPatch
from chronicler.domain.model.entity import Entity
from chronicler.domain.model.enums import ContentStatus, EntityKind

if TYPE_CHECKING:
    from datetime import datetime

    from chronicler.domain.model.primitives import PersonId, UserId


@dataclass(eq=False, kw_only=True)
class PersonEdit(Entity):
    """A queued patch against an approved person, reviewed on its own.

    Its status only ever takes ``pending``, ``approved`` or ``rejected``.
    """

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.PERSON_EDIT

    person_id: PersonId
    proposer_user_id: UserId
    payload: PersonPatch = field(default_factory=PersonPatch)
    status: ContentStatus = ContentStatus.PENDING
    review_comment: str | None = None
    reviewed_by: UserId | None = None
    created_at: datetime | None = None
    reviewed_at: datetime | None = None

    def record_review(
        self,
        status: ContentStatus,
        *,
        reviewer: UserId,
        comment: str | None,
        at: datetime,
    ) -> None:
        self.status = status
        self.reviewed_by = reviewer
        self.review_comment = comment
        self.reviewed_at = at
