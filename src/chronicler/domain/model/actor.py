"""Authenticated caller identity, supplied by the authentication collaborator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from chronicler.domain.model.enums import MODERATOR_ROLES, UserRole

if TYPE_CHECKING:
    from chronicler.domain.model.primitives import UserId


@dataclass(frozen=True, slots=True)
class Actor:
    id: UserId
    role: UserRole = UserRole.USER
    email: str | None = None

    @property
    def is_moderator(self) -> bool:
        return self.role in MODERATOR_ROLES

    def owns(self, owner_id: UserId | None) -> bool:
        return owner_id is not None and owner_id == self.id
