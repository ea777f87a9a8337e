"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ContentStatus(StrEnum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PeriodType(StrEnum):
    LIFE = "life"
    RULER = "ruler"
    OTHER = "other"


class UserRole(StrEnum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class ReviewAction(StrEnum):
    APPROVE = "approve"
    REJECT = "reject"


class EntityKind(StrEnum):
    """Discriminator used by the lifecycle decision table."""

    PERSON = "person"
    PERIOD = "period"
    ACHIEVEMENT = "achievement"
    PERSON_EDIT = "person_edit"


MODERATOR_ROLES: frozenset[UserRole] = frozenset({UserRole.MODERATOR, UserRole.ADMIN})
