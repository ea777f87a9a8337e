"""Reusable actors, factories and fakes for content lifecycle tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from chronicler.domain.model import Actor, PersonAttributes, UserRole

if TYPE_CHECKING:
    from chronicler.domain.content import ContentRepository
    from chronicler.domain.intervals import RawInterval
    from chronicler.domain.model import Person
    from chronicler.domain.ports.notifications import NotificationEvent, NotificationKind

OWNER = Actor(id=1, email="owner@example.com")
OTHER_USER = Actor(id=2, email="other@example.com")
MODERATOR = Actor(id=10, role=UserRole.MODERATOR, email="mod@example.com")
ADMIN = Actor(id=11, role=UserRole.ADMIN, email="admin@example.com")

TWO_COUNTRY_LIFE: tuple[RawInterval, ...] = ((1, 1815, 1830), (2, 1830, 1852))


def make_attributes(
    name: str = "Ada Lovelace",
    *,
    birth_year: int = 1815,
    death_year: int = 1852,
    category: str = "science",
    description: str = "Mathematician",
) -> PersonAttributes:
    return PersonAttributes(
        name=name,
        birth_year=birth_year,
        death_year=death_year,
        category=category,
        description=description,
    )


def create_draft(
    content: ContentRepository,
    *,
    actor: Actor = OWNER,
    name: str = "Ada Lovelace",
    periods: tuple[RawInterval, ...] | None = TWO_COUNTRY_LIFE,
) -> Person:
    return content.create_draft_or_submission(
        make_attributes(name),
        list(periods) if periods is not None else None,
        actor,
        save_as_draft=True,
    )


@dataclass
class SteppingClock:
    """Deterministic clock advancing one minute per reading."""

    current: datetime = field(default_factory=lambda: datetime(2024, 1, 1, 12, 0, tzinfo=UTC))
    step: timedelta = timedelta(minutes=1)

    def __call__(self) -> datetime:
        self.current += self.step
        return self.current


class RecordingNotifier:
    """Notifier fake capturing every event it receives."""

    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []

    def notify(self, event: NotificationEvent) -> None:
        self.events.append(event)

    @property
    def kinds(self) -> list[NotificationKind]:
        return [event.kind for event in self.events]


class FailingNotifier:
    """Notifier fake whose delivery always blows up."""

    def __init__(self) -> None:
        self.calls = 0

    def notify(self, event: NotificationEvent) -> None:
        self.calls += 1
        raise RuntimeError(f"delivery failed for {event.kind}")
