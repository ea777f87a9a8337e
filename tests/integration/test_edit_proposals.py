from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from chronicler.domain.errors import (
    Forbidden,
    InvalidAttribute,
    InvalidTransition,
    NotEditable,
    NotFound,
)
from chronicler.domain.model import ContentStatus, PersonPatch, ReviewAction
from chronicler.domain.ports.notifications import NotificationKind
from tests.helpers.content import (
    ADMIN,
    MODERATOR,
    OTHER_USER,
    OWNER,
    RecordingNotifier,
    create_draft,
    make_attributes,
)

if TYPE_CHECKING:
    from chronicler.domain.content import ContentRepository
    from chronicler.domain.edits import EditProposalManager
    from chronicler.domain.model import Person

PERSON_ID = "ada-lovelace"


@pytest.fixture
def approved_person(content: ContentRepository, notifier: RecordingNotifier) -> Person:
    create_draft(content)
    content.submit(PERSON_ID, OWNER)
    person = content.review(PERSON_ID, ReviewAction.APPROVE, MODERATOR)
    notifier.events.clear()
    return person


def test_propose_edit_queues_pending_edit(
    edits: EditProposalManager,
    content: ContentRepository,
    notifier: RecordingNotifier,
    approved_person: Person,
) -> None:
    edit = edits.propose_edit(
        approved_person.id, PersonPatch(description="Analyst and metaphysician"), OTHER_USER
    )

    assert edit.status is ContentStatus.PENDING
    assert edit.proposer_user_id == OTHER_USER.id
    assert edit.created_at is not None
    assert edit.payload.supplied() == {"description": "Analyst and metaphysician"}

    # the person itself is untouched until review
    person = content.get_person(PERSON_ID)
    assert person.description == "Mathematician"
    assert person.status is ContentStatus.APPROVED

    assert notifier.kinds == [NotificationKind.EDIT_PROPOSED]
    assert notifier.events[0].actor_email == OTHER_USER.email


def test_propose_edit_for_unknown_person(edits: EditProposalManager) -> None:
    with pytest.raises(NotFound):
        edits.propose_edit("nobody", PersonPatch(name="Nobody"), OWNER)


def test_propose_edit_on_draft_is_not_editable(
    edits: EditProposalManager, content: ContentRepository
) -> None:
    create_draft(content)

    with pytest.raises(NotEditable) as exc:
        edits.propose_edit(PERSON_ID, PersonPatch(category="poetry"), OWNER)

    assert exc.value.current_status is ContentStatus.DRAFT
    assert exc.value.to_dict()["kind"] == "not_editable"


def test_propose_edit_on_pending_is_not_editable(
    edits: EditProposalManager, content: ContentRepository
) -> None:
    create_draft(content)
    content.submit(PERSON_ID, OWNER)

    with pytest.raises(NotEditable):
        edits.propose_edit(PERSON_ID, PersonPatch(category="poetry"), MODERATOR)


def test_empty_payload_is_rejected(
    edits: EditProposalManager, approved_person: Person
) -> None:
    with pytest.raises(InvalidAttribute):
        edits.propose_edit(approved_person.id, PersonPatch(), OWNER)

    assert edits.pending_edits() == []


@pytest.mark.parametrize(
    "patch",
    [
        PersonPatch(birth_year=1900),
        PersonPatch(death_year=1800),
        PersonPatch(name="   "),
    ],
    ids=["birth-after-death", "death-before-birth", "blank-name"],
)
def test_payload_that_breaks_the_person_is_rejected(
    edits: EditProposalManager, approved_person: Person, patch: PersonPatch
) -> None:
    with pytest.raises(InvalidAttribute):
        edits.propose_edit(approved_person.id, patch, OWNER)

    assert edits.pending_edits() == []


def test_edit_payload_is_trimmed_before_it_is_stored(
    edits: EditProposalManager, content: ContentRepository, approved_person: Person
) -> None:
    edit = edits.propose_edit(
        approved_person.id, PersonPatch(name="   Ada King   ", category="  x "), OTHER_USER
    )

    [stored] = edits.pending_edits()
    assert stored.payload.supplied() == {"name": "Ada King", "category": "x"}

    edits.review_edit(edit.id, ReviewAction.APPROVE, MODERATOR)

    person = content.get_person(PERSON_ID)
    assert person.name == "Ada King"
    assert person.category == "x"


def test_payload_that_normalizes_to_nothing_is_rejected(
    edits: EditProposalManager, approved_person: Person
) -> None:
    with pytest.raises(InvalidAttribute):
        edits.propose_edit(approved_person.id, PersonPatch(wiki_link=""), OTHER_USER)

    assert edits.pending_edits() == []


def test_approving_an_edit_applies_it(
    edits: EditProposalManager,
    content: ContentRepository,
    notifier: RecordingNotifier,
    approved_person: Person,
) -> None:
    edit = edits.propose_edit(
        approved_person.id,
        PersonPatch(death_year=1853, wiki_link="https://en.wikipedia.org/wiki/Ada_Lovelace"),
        OTHER_USER,
    )

    reviewed = edits.review_edit(edit.id, ReviewAction.APPROVE, ADMIN, comment="Sourced")

    assert reviewed.status is ContentStatus.APPROVED
    assert reviewed.reviewed_by == ADMIN.id
    assert reviewed.review_comment == "Sourced"
    assert reviewed.reviewed_at is not None

    person = content.get_person(PERSON_ID)
    assert person.death_year == 1853
    assert person.wiki_link == "https://en.wikipedia.org/wiki/Ada_Lovelace"
    assert person.name == "Ada Lovelace"
    assert person.updated_by == ADMIN.id
    assert person.status is ContentStatus.APPROVED

    assert notifier.kinds == [
        NotificationKind.EDIT_PROPOSED,
        NotificationKind.EDIT_REVIEWED_APPROVED,
    ]
    assert notifier.events[-1].actor_email == ADMIN.email


def test_rejecting_an_edit_leaves_the_person_alone(
    edits: EditProposalManager,
    content: ContentRepository,
    notifier: RecordingNotifier,
    approved_person: Person,
) -> None:
    edit = edits.propose_edit(approved_person.id, PersonPatch(category="poetry"), OTHER_USER)

    reviewed = edits.review_edit(edit.id, ReviewAction.REJECT, MODERATOR, comment="No source")

    assert reviewed.status is ContentStatus.REJECTED
    person = content.get_person(PERSON_ID)
    assert person.category == "science"
    assert person.updated_by is None
    assert notifier.kinds[-1] is NotificationKind.EDIT_REVIEWED_REJECTED


def test_edit_can_be_reviewed_only_once(
    edits: EditProposalManager, approved_person: Person
) -> None:
    edit = edits.propose_edit(approved_person.id, PersonPatch(category="poetry"), OTHER_USER)
    edits.review_edit(edit.id, ReviewAction.REJECT, MODERATOR)

    with pytest.raises(InvalidTransition) as exc:
        edits.review_edit(edit.id, ReviewAction.APPROVE, MODERATOR)

    assert exc.value.current_status is ContentStatus.REJECTED


def test_plain_users_cannot_review_edits(
    edits: EditProposalManager, approved_person: Person
) -> None:
    edit = edits.propose_edit(approved_person.id, PersonPatch(category="poetry"), OTHER_USER)

    with pytest.raises(Forbidden):
        edits.review_edit(edit.id, ReviewAction.APPROVE, OWNER)

    [still_pending] = edits.pending_edits()
    assert still_pending.id == edit.id


def test_review_of_unknown_edit(edits: EditProposalManager) -> None:
    with pytest.raises(NotFound):
        edits.review_edit(uuid4(), ReviewAction.APPROVE, MODERATOR)


def test_edits_are_reviewed_independently(
    edits: EditProposalManager, content: ContentRepository, approved_person: Person
) -> None:
    first = edits.propose_edit(approved_person.id, PersonPatch(category="poetry"), OTHER_USER)
    second = edits.propose_edit(
        approved_person.id, PersonPatch(description="Enchantress of numbers"), OWNER
    )

    assert [edit.id for edit in edits.pending_edits()] == [first.id, second.id]

    edits.review_edit(second.id, ReviewAction.APPROVE, MODERATOR)

    assert [edit.id for edit in edits.pending_edits()] == [first.id]
    person = content.get_person(PERSON_ID)
    assert person.description == "Enchantress of numbers"
    assert person.category == "science"


def test_approved_person_can_still_be_edited_after_publish(
    edits: EditProposalManager, content: ContentRepository
) -> None:
    content.publish(make_attributes(), MODERATOR)

    edit = edits.propose_edit(PERSON_ID, PersonPatch(name="Augusta Ada King"), OTHER_USER)
    edits.review_edit(edit.id, ReviewAction.APPROVE, MODERATOR)

    person = content.get_person(PERSON_ID)
    assert person.id == PERSON_ID
    assert person.name == "Augusta Ada King"
