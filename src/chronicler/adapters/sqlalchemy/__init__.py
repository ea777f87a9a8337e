"""SQLAlchemy adapter package for Chronicler."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyAchievementRepository,
    SqlAlchemyPeriodRepository,
    SqlAlchemyPersonEditRepository,
    SqlAlchemyPersonRepository,
)
from .unit_of_work import SqlAlchemyContentUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyAchievementRepository",
    "SqlAlchemyContentUnitOfWork",
    "SqlAlchemyPeriodRepository",
    "SqlAlchemyPersonEditRepository",
    "SqlAlchemyPersonRepository",
    "StartupError",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
