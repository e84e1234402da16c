"""SQLAlchemy adapter package for codewatch."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyActivityLogRepository,
    SqlAlchemyApplicationRepository,
    SqlAlchemyChangeLogRepository,
    SqlAlchemyPropertyRepository,
    SqlAlchemyViolationRepository,
)
from .unit_of_work import SqlAlchemySyncUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyActivityLogRepository",
    "SqlAlchemyApplicationRepository",
    "SqlAlchemyChangeLogRepository",
    "SqlAlchemyPropertyRepository",
    "SqlAlchemySyncUnitOfWork",
    "SqlAlchemyViolationRepository",
    "StartupError",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
