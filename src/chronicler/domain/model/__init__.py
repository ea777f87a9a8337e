"""Public domain model surface."""

from __future__ import annotations

from chronicler.domain.model.actor import Actor
from chronicler.domain.model.content import (
    Achievement,
    Period,
    Person,
    PersonAttributes,
    PersonPatch,
    check_lifespan,
)
from chronicler.domain.model.edits import PersonEdit
from chronicler.domain.model.entity import Entity, ModeratedMixin
from chronicler.domain.model.enums import (
    MODERATOR_ROLES,
    ContentStatus,
    EntityKind,
    PeriodType,
    ReviewAction,
    UserRole,
)
from chronicler.domain.model.primitives import (
    CountryId,
    PersonId,
    UserId,
    Year,
    person_slug,
)

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "ModeratedMixin",
    # content
    "Person",
    "PersonAttributes",
    "PersonPatch",
    "Period",
    "Achievement",
    "check_lifespan",
    # edits
    "PersonEdit",
    # callers
    "Actor",
    # enums
    "ContentStatus",
    "EntityKind",
    "PeriodType",
    "ReviewAction",
    "UserRole",
    "MODERATOR_ROLES",
    # primitives
    "CountryId",
    "PersonId",
    "UserId",
    "Year",
    "person_slug",
]
