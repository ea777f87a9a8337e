from __future__ import annotations

from datetime import UTC, datetime

import pytest

from chronicler.domain.errors import Forbidden, InvalidTransition, NotEditable
from chronicler.domain.lifecycle import (
    DEFAULT_RULES,
    LifecycleTransitionPolicy,
    SideEffect,
    Transition,
    TransitionRule,
    cascade_statuses,
)
from chronicler.domain.model import Actor, ContentStatus, EntityKind, Period, ReviewAction
from tests.helpers.content import ADMIN, MODERATOR, OTHER_USER, OWNER

AT = datetime(2024, 5, 1, tzinfo=UTC)

policy = LifecycleTransitionPolicy()


@pytest.mark.parametrize(
    "status", [ContentStatus.DRAFT, ContentStatus.APPROVED, ContentStatus.REJECTED]
)
@pytest.mark.parametrize("actor", [OWNER, OTHER_USER, MODERATOR, ADMIN], ids=lambda a: a.role)
@pytest.mark.parametrize("transition", [Transition.APPROVE, Transition.REJECT])
def test_review_outside_pending_is_invalid_for_every_role(
    status: ContentStatus, actor: Actor, transition: Transition
) -> None:
    with pytest.raises(InvalidTransition) as exc:
        policy.decide(
            EntityKind.PERSON,
            transition,
            current=status,
            actor=actor,
        )

    assert exc.value.current_status is status


def test_review_by_plain_user_is_forbidden() -> None:
    with pytest.raises(Forbidden):
        policy.decide(
            EntityKind.PERSON, Transition.APPROVE, current=ContentStatus.PENDING, actor=OWNER
        )


def test_review_decision_stamps_and_notifies_without_cascade() -> None:
    decision = policy.decide(
        EntityKind.PERSON, Transition.REJECT, current=ContentStatus.PENDING, actor=ADMIN
    )

    assert decision.target is ContentStatus.REJECTED
    assert decision.has(SideEffect.STAMP_REVIEW)
    assert decision.has(SideEffect.NOTIFY)
    assert decision.cascade is None


def test_submit_cascades_drafts_and_validates_coverage() -> None:
    decision = policy.decide(
        EntityKind.PERSON,
        Transition.SUBMIT,
        current=ContentStatus.DRAFT,
        actor=OWNER,
        owner_id=OWNER.id,
    )

    assert decision.target is ContentStatus.PENDING
    assert decision.changes_status
    assert decision.has(SideEffect.VALIDATE_COVERAGE)
    assert decision.cascade == (ContentStatus.DRAFT, ContentStatus.PENDING)


@pytest.mark.parametrize("actor", [OTHER_USER, MODERATOR], ids=["user", "moderator"])
def test_only_the_owner_may_submit(actor: Actor) -> None:
    with pytest.raises(Forbidden):
        policy.decide(
            EntityKind.PERSON,
            Transition.SUBMIT,
            current=ContentStatus.DRAFT,
            actor=actor,
            owner_id=OWNER.id,
        )


def test_status_is_checked_before_ownership() -> None:
    with pytest.raises(InvalidTransition):
        policy.decide(
            EntityKind.PERSON,
            Transition.SUBMIT,
            current=ContentStatus.PENDING,
            actor=OTHER_USER,
            owner_id=OWNER.id,
        )


def test_revert_moves_pending_back_to_draft() -> None:
    decision = policy.decide(
        EntityKind.PERSON,
        Transition.REVERT,
        current=ContentStatus.PENDING,
        actor=OWNER,
        owner_id=OWNER.id,
    )

    assert decision.target is ContentStatus.DRAFT
    assert decision.cascade == (ContentStatus.PENDING, ContentStatus.DRAFT)


def test_moderators_may_update_someone_elses_draft() -> None:
    decision = policy.decide(
        EntityKind.PERSON,
        Transition.UPDATE_DRAFT,
        current=ContentStatus.DRAFT,
        actor=MODERATOR,
        owner_id=OWNER.id,
    )

    assert decision.target is None
    assert not decision.changes_status


def test_other_users_may_not_update_a_draft() -> None:
    with pytest.raises(Forbidden):
        policy.decide(
            EntityKind.PERSON,
            Transition.UPDATE_DRAFT,
            current=ContentStatus.DRAFT,
            actor=OTHER_USER,
            owner_id=OWNER.id,
        )


@pytest.mark.parametrize("status", [ContentStatus.DRAFT, ContentStatus.PENDING])
def test_edits_need_an_approved_person(status: ContentStatus) -> None:
    with pytest.raises(NotEditable) as exc:
        policy.decide(EntityKind.PERSON, Transition.PROPOSE_EDIT, current=status, actor=OWNER)

    assert exc.value.current_status is status


def test_anyone_may_propose_edits_to_approved_persons() -> None:
    decision = policy.decide(
        EntityKind.PERSON,
        Transition.PROPOSE_EDIT,
        current=ContentStatus.APPROVED,
        actor=OTHER_USER,
        owner_id=OWNER.id,
    )

    assert decision.target is None


def test_publish_is_reserved_for_moderators() -> None:
    with pytest.raises(Forbidden):
        policy.decide(EntityKind.PERSON, Transition.PUBLISH, current=None, actor=OWNER)


@pytest.mark.parametrize("status", [None, *ContentStatus])
def test_moderators_may_publish_from_any_state(status: ContentStatus | None) -> None:
    decision = policy.decide(EntityKind.PERSON, Transition.PUBLISH, current=status, actor=ADMIN)

    assert decision.target is ContentStatus.APPROVED


def test_approving_an_edit_applies_it() -> None:
    decision = policy.decide(
        EntityKind.PERSON_EDIT, Transition.APPROVE, current=ContentStatus.PENDING, actor=MODERATOR
    )

    assert decision.has(SideEffect.APPLY_EDIT)


def test_undefined_transition_is_invalid() -> None:
    with pytest.raises(InvalidTransition, match="not defined"):
        policy.decide(EntityKind.PERSON_EDIT, Transition.SUBMIT, current=None, actor=MODERATOR)


@pytest.mark.parametrize(
    ("actor", "save_as_draft", "expected"),
    [
        (OWNER, True, Transition.CREATE_DRAFT),
        (MODERATOR, True, Transition.CREATE_DRAFT),
        (OWNER, False, Transition.CREATE_SUBMISSION),
        (MODERATOR, False, Transition.PUBLISH),
        (ADMIN, False, Transition.PUBLISH),
    ],
)
def test_creation_transition(actor: Actor, save_as_draft: bool, expected: Transition) -> None:
    assert (
        LifecycleTransitionPolicy.creation_transition(
            actor,
            save_as_draft=save_as_draft,
        )
        is expected
    )


def test_review_transition() -> None:
    assert policy.review_transition(ReviewAction.APPROVE) is Transition.APPROVE
    assert policy.review_transition(ReviewAction.REJECT) is Transition.REJECT


def test_rules_can_be_overridden() -> None:
    rules = dict(DEFAULT_RULES)
    rules[(EntityKind.PERSON, Transition.SUBMIT)] = TransitionRule(
        sources=frozenset({ContentStatus.DRAFT}),
        target=ContentStatus.PENDING,
    )
    custom = LifecycleTransitionPolicy(rules)

    decision = custom.decide(
        EntityKind.PERSON,
        Transition.SUBMIT,
        current=ContentStatus.DRAFT,
        actor=OTHER_USER,
        owner_id=OWNER.id,
    )

    assert decision.cascade is None


def test_cascade_moves_only_matching_items() -> None:
    draft = Period(person_id="p", country_id=1, start_year=1900, end_year=1950)
    approved = Period(
        person_id="p",
        country_id=2,
        start_year=1950,
        end_year=1980,
        status=ContentStatus.APPROVED,
    )

    moved = cascade_statuses(
        [draft, approved], (ContentStatus.DRAFT, ContentStatus.PENDING), at=AT
    )

    assert moved == [draft]
    assert draft.status is ContentStatus.PENDING
    assert draft.submitted_at == AT
    assert approved.status is ContentStatus.APPROVED
    assert approved.updated_at is None
