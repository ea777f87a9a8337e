"""
Base building blocks:
identity and moderation bookkeeping shared by all curated content.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar
from uuid import UUID, uuid4

from chronicler.domain.model.enums import ContentStatus

if TYPE_CHECKING:
    from datetime import datetime

    from chronicler.domain.model.enums import EntityKind
    from chronicler.domain.model.primitives import UserId


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: UUID = field(default_factory=new_id)

    # class-level discriminator; subclasses must override
    ENTITY_KIND: ClassVar[EntityKind]

    @property
    def entity_kind(self) -> EntityKind:
        return self.ENTITY_KIND


@dataclass(eq=False, kw_only=True)
class ModeratedMixin:
    """Workflow state carried by every moderated row."""

    status: ContentStatus = ContentStatus.DRAFT
    created_by: UserId | None = None
    submitted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_draft(self) -> bool:
        return self.status is ContentStatus.DRAFT

    def move_to(self, status: ContentStatus, *, at: datetime) -> None:
        """Set the workflow status, keeping submission bookkeeping consistent.

        Entering ``pending`` stamps ``submitted_at``; returning to ``draft`` clears it.
        """

        if status is ContentStatus.PENDING:
            self.submitted_at = at
        elif status is ContentStatus.DRAFT:
            self.submitted_at = None
        self.status = status
        self.updated_at = at
