"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from chronicler.adapters.notifications import BackgroundNotifier, LoggingNotifier
from chronicler.adapters.sqlalchemy.migrations import upgrade_head
from chronicler.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyContentUnitOfWork,
    is_started,
    startup,
)
from chronicler.config import get_database_config, get_notification_config
from chronicler.domain.content import ContentRepository
from chronicler.domain.edits import EditProposalManager
from chronicler.domain.intervals import intervals_of, normalize_life_periods
from chronicler.domain.lifecycle import LifecycleTransitionPolicy
from chronicler.domain.model import ContentStatus
from chronicler.domain.ports.unit_of_work import ContentUnitOfWork

if TYPE_CHECKING:
    from chronicler.config import NotificationConfig
    from chronicler.domain.intervals import LifeInterval
    from chronicler.domain.model import PersonId
    from chronicler.domain.ports.notifications import Notifier

UnitOfWorkFactory = Callable[[], ContentUnitOfWork]


log = getLogger(__name__)


@dataclass(slots=True)
class Services:
    """Engine services sharing one store, policy and notifier."""

    content: ContentRepository
    edits: EditProposalManager


def build_notifier(config: NotificationConfig | None = None) -> Notifier | None:
    """Return the configured notifier, or ``None`` when notifications are off."""

    effective = config or get_notification_config()
    if not effective.enabled:
        log.debug("Notifications disabled")
        return None
    notifier = LoggingNotifier()
    if effective.background:
        return BackgroundNotifier(notifier)
    return notifier


def build_services(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    notifier: Notifier | None = None,
    policy: LifecycleTransitionPolicy | None = None,
) -> Services:
    """Wire the engine against the configured store (started on demand) and notifier."""

    if unit_of_work_factory is None and not is_started():
        startup()
    effective_uow = unit_of_work_factory or SqlAlchemyContentUnitOfWork
    effective_notifier = notifier if notifier is not None else build_notifier()
    effective_policy = policy or LifecycleTransitionPolicy()
    return Services(
        content=ContentRepository(
            effective_uow, policy=effective_policy, notifier=effective_notifier
        ),
        edits=EditProposalManager(
            effective_uow, policy=effective_policy, notifier=effective_notifier
        ),
    )


def upgrade_database(*, database_uri: str | None = None) -> str:
    """Run migrations up to head and return the database URI that was upgraded."""

    uri = database_uri or get_database_config().uri
    log.info("Upgrading database schema at %s", uri)
    upgrade_head(database_uri=uri)
    return uri


def check_life_periods(person_id: PersonId, *, services: Services) -> list[LifeInterval]:
    """Re-run the normalizer over a person's stored, non-rejected life periods.

    Raises the normalizer's failure when the stored set is inconsistent.
    """

    person = services.content.get_person(person_id)
    periods = [
        period
        for period in services.content.life_periods(person_id)
        if period.status is not ContentStatus.REJECTED
    ]
    intervals = normalize_life_periods(
        intervals_of(periods), birth_year=person.birth_year, death_year=person.death_year
    )
    log.info("Life periods of %s are consistent (%d intervals)", person_id, len(intervals))
    return intervals
