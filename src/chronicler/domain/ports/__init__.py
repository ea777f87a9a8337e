"""Domain port definitions for adapters."""

from __future__ import annotations

from .notifications import NotificationEvent, NotificationKind, Notifier, notify_safely
from .persistence import (
    AchievementRepository,
    PeriodRepository,
    PersonEditRepository,
    PersonRepository,
    Repository,
)
from .unit_of_work import (
    ContentRepositories,
    ContentUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AchievementRepository",
    "ContentRepositories",
    "ContentUnitOfWork",
    "NotificationEvent",
    "NotificationKind",
    "Notifier",
    "PeriodRepository",
    "PersonEditRepository",
    "PersonRepository",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
    "notify_safely",
]
