"""Lifecycle transition policy for moderated content.

States: ``draft -> pending -> {approved, rejected}`` with ``pending -> draft`` (revert)
as the only backward edge. Everything that may happen to a person, its dependents or
an edit proposal is one row of ``DEFAULT_RULES``, keyed by ``(entity kind, transition)``.

Checks run in a fixed order: state precondition first, then role, then ownership. A
request that is wrong on several counts therefore always reports the state problem.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from chronicler.domain.errors import Forbidden, InvalidTransition, NotEditable, StatusError
from chronicler.domain.model import (
    MODERATOR_ROLES,
    ContentStatus,
    EntityKind,
    ReviewAction,
    UserRole,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from chronicler.domain.model import Actor, ModeratedMixin, UserId

log = logging.getLogger(__name__)


class Transition(StrEnum):
    CREATE_DRAFT = "create_draft"
    CREATE_SUBMISSION = "create_submission"
    PUBLISH = "publish"
    UPDATE_DRAFT = "update_draft"
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    REVERT = "revert"
    REPLACE_LIFE_PERIODS = "replace_life_periods"
    DELETE_DRAFT = "delete_draft"
    PROPOSE_EDIT = "propose_edit"


class SideEffect(StrEnum):
    VALIDATE_COVERAGE = "validate_coverage"
    CASCADE_SUBMIT = "cascade_submit"
    CASCADE_REVERT = "cascade_revert"
    STAMP_REVIEW = "stamp_review"
    APPLY_EDIT = "apply_edit"
    NOTIFY = "notify"


ALL_ROLES: Final[frozenset[UserRole]] = frozenset(UserRole)
ALL_STATUSES: Final[frozenset[ContentStatus | None]] = frozenset({None, *ContentStatus})

# (dependent status that moves, status it moves to)
CASCADES: Final[dict[SideEffect, tuple[ContentStatus, ContentStatus]]] = {
    SideEffect.CASCADE_SUBMIT: (ContentStatus.DRAFT, ContentStatus.PENDING),
    SideEffect.CASCADE_REVERT: (ContentStatus.PENDING, ContentStatus.DRAFT),
}


@dataclass(frozen=True, slots=True, kw_only=True)
class TransitionRule:
    """One row of the decision table.

    ``None`` in ``sources`` stands for "does not exist yet"; a ``None`` target leaves
    the status unchanged.
    """

    sources: frozenset[ContentStatus | None]
    target: ContentStatus | None
    roles: frozenset[UserRole] = ALL_ROLES
    owner_only: bool = False
    moderators_bypass_ownership: bool = True
    effects: frozenset[SideEffect] = field(default_factory=frozenset[SideEffect])
    precondition_error: type[StatusError] = InvalidTransition


@dataclass(frozen=True, slots=True)
class TransitionDecision:
    """Outcome of an allowed transition."""

    kind: EntityKind
    transition: Transition
    source: ContentStatus | None
    target: ContentStatus | None
    effects: frozenset[SideEffect]

    def has(self, effect: SideEffect) -> bool:
        return effect in self.effects

    @property
    def changes_status(self) -> bool:
        return self.target is not None and self.target != self.source

    @property
    def cascade(self) -> tuple[ContentStatus, ContentStatus] | None:
        for effect, movement in CASCADES.items():
            if effect in self.effects:
                return movement
        return None


type RuleKey = tuple[EntityKind, Transition]


def _rule(
    sources: Iterable[ContentStatus | None],
    target: ContentStatus | None,
    *effects: SideEffect,
    roles: frozenset[UserRole] = ALL_ROLES,
    owner_only: bool = False,
    moderators_bypass_ownership: bool = True,
    precondition_error: type[StatusError] = InvalidTransition,
) -> TransitionRule:
    return TransitionRule(
        sources=frozenset(sources),
        target=target,
        roles=roles,
        owner_only=owner_only,
        moderators_bypass_ownership=moderators_bypass_ownership,
        effects=frozenset(effects),
        precondition_error=precondition_error,
    )


_NEW: Final = None
_DRAFT: Final = ContentStatus.DRAFT
_PENDING: Final = ContentStatus.PENDING
_APPROVED: Final = ContentStatus.APPROVED
_REJECTED: Final = ContentStatus.REJECTED

_PERSON_RULES: Final[dict[Transition, TransitionRule]] = {
    Transition.CREATE_DRAFT: _rule((_NEW, _DRAFT), _DRAFT, owner_only=True),
    Transition.CREATE_SUBMISSION: _rule(
        (_NEW, _DRAFT),
        _PENDING,
        SideEffect.CASCADE_SUBMIT,
        SideEffect.NOTIFY,
        owner_only=True,
    ),
    Transition.PUBLISH: _rule(ALL_STATUSES, _APPROVED, SideEffect.NOTIFY, roles=MODERATOR_ROLES),
    Transition.UPDATE_DRAFT: _rule((_DRAFT,), None, owner_only=True),
    Transition.SUBMIT: _rule(
        (_DRAFT,),
        _PENDING,
        SideEffect.VALIDATE_COVERAGE,
        SideEffect.CASCADE_SUBMIT,
        SideEffect.NOTIFY,
        owner_only=True,
        moderators_bypass_ownership=False,
    ),
    Transition.APPROVE: _rule(
        (_PENDING,), _APPROVED, SideEffect.STAMP_REVIEW, SideEffect.NOTIFY, roles=MODERATOR_ROLES
    ),
    Transition.REJECT: _rule(
        (_PENDING,), _REJECTED, SideEffect.STAMP_REVIEW, SideEffect.NOTIFY, roles=MODERATOR_ROLES
    ),
    Transition.REVERT: _rule(
        (_PENDING,),
        _DRAFT,
        SideEffect.CASCADE_REVERT,
        owner_only=True,
        moderators_bypass_ownership=False,
    ),
    Transition.REPLACE_LIFE_PERIODS: _rule(
        (_DRAFT, _PENDING, _APPROVED, _REJECTED), None, owner_only=True
    ),
    Transition.DELETE_DRAFT: _rule(
        (_DRAFT,), None, owner_only=True, moderators_bypass_ownership=False
    ),
    Transition.PROPOSE_EDIT: _rule((_APPROVED,), None, precondition_error=NotEditable),
}

_DEPENDENT_RULES: Final[dict[Transition, TransitionRule]] = {
    Transition.CREATE_DRAFT: _rule((_NEW,), _DRAFT),
    Transition.CREATE_SUBMISSION: _rule((_NEW,), _PENDING),
    Transition.PUBLISH: _rule((_NEW,), _APPROVED, roles=MODERATOR_ROLES),
}

_EDIT_RULES: Final[dict[Transition, TransitionRule]] = {
    Transition.CREATE_SUBMISSION: _rule((_NEW,), _PENDING, SideEffect.NOTIFY),
    Transition.APPROVE: _rule(
        (_PENDING,),
        _APPROVED,
        SideEffect.STAMP_REVIEW,
        SideEffect.APPLY_EDIT,
        SideEffect.NOTIFY,
        roles=MODERATOR_ROLES,
    ),
    Transition.REJECT: _rule(
        (_PENDING,), _REJECTED, SideEffect.STAMP_REVIEW, SideEffect.NOTIFY, roles=MODERATOR_ROLES
    ),
}

DEFAULT_RULES: Final[dict[RuleKey, TransitionRule]] = {
    **{(EntityKind.PERSON, transition): rule for transition, rule in _PERSON_RULES.items()},
    **{(EntityKind.PERIOD, transition): rule for transition, rule in _DEPENDENT_RULES.items()},
    **{
        (EntityKind.ACHIEVEMENT, transition): rule
        for transition, rule in _DEPENDENT_RULES.items()
    },
    **{(EntityKind.PERSON_EDIT, transition): rule for transition, rule in _EDIT_RULES.items()},
}


class LifecycleTransitionPolicy:
    """Pure decision table: (kind, status, actor, transition) -> decision or failure."""

    def __init__(self, rules: Mapping[RuleKey, TransitionRule] | None = None) -> None:
        self._rules: dict[RuleKey, TransitionRule] = dict(rules or DEFAULT_RULES)

    def rule(self, kind: EntityKind, transition: Transition) -> TransitionRule:
        try:
            return self._rules[(kind, transition)]
        except KeyError:
            raise InvalidTransition(
                f"Transition '{transition}' is not defined for {kind}",
                current_status=None,
            ) from None

    def decide(
        self,
        kind: EntityKind,
        transition: Transition,
        *,
        current: ContentStatus | None,
        actor: Actor,
        owner_id: UserId | None = None,
    ) -> TransitionDecision:
        """Return the decision for ``transition`` or raise the failure that blocks it."""

        rule = self.rule(kind, transition)

        if current not in rule.sources:
            state = current if current is not None else "new"
            log.debug("Rejecting %s on %s in state %s", transition, kind, state)
            raise rule.precondition_error(
                f"Cannot {transition.replace('_', ' ')} a {kind.replace('_', ' ')} "
                f"in status '{state}'",
                current_status=current,
            )

        if actor.role not in rule.roles:
            log.debug("Rejecting %s on %s for role %s", transition, kind, actor.role)
            raise Forbidden(f"Role '{actor.role}' may not {transition.replace('_', ' ')}")

        if (
            rule.owner_only
            and current is not None
            and not actor.owns(owner_id)
            and not (rule.moderators_bypass_ownership and actor.is_moderator)
        ):
            log.debug("Rejecting %s on %s: actor %s is not the owner", transition, kind, actor.id)
            raise Forbidden(f"Only the owner may {transition.replace('_', ' ')} this {kind}")

        return TransitionDecision(
            kind=kind,
            transition=transition,
            source=current,
            target=rule.target,
            effects=rule.effects,
        )

    @staticmethod
    def creation_transition(actor: Actor, *, save_as_draft: bool) -> Transition:
        """Pick how new content enters the workflow for ``actor``."""

        if save_as_draft:
            return Transition.CREATE_DRAFT
        if actor.is_moderator:
            return Transition.PUBLISH
        return Transition.CREATE_SUBMISSION

    @staticmethod
    def review_transition(action: ReviewAction) -> Transition:
        return Transition.APPROVE if action is ReviewAction.APPROVE else Transition.REJECT


def cascade_statuses[T: ModeratedMixin](
    items: Iterable[T],
    movement: tuple[ContentStatus, ContentStatus],
    *,
    at: datetime,
) -> list[T]:
    """Move every item currently in ``movement[0]`` to ``movement[1]``; return the moved."""

    source, target = movement
    moved: list[T] = []
    for item in items:
        if item.status is source:
            item.move_to(target, at=at)
            moved.append(item)
    return moved


__all__ = [
    "ALL_ROLES",
    "CASCADES",
    "DEFAULT_RULES",
    "LifecycleTransitionPolicy",
    "SideEffect",
    "Transition",
    "TransitionDecision",
    "TransitionRule",
    "cascade_statuses",
]
