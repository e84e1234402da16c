"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import ApplicationSource, RecordSource, ViolationSource
from .notifications import NotificationGateway
from .persistence import (
    ActivityLogRepository,
    ApplicationRepository,
    ChangeLogRepository,
    PersistenceError,
    PropertyRepository,
    Repository,
    ViolationRepository,
)
from .unit_of_work import RepositoryCollection, SyncRepositories, SyncUnitOfWork, UnitOfWork

__all__ = [
    "ActivityLogRepository",
    "ApplicationRepository",
    "ApplicationSource",
    "ChangeLogRepository",
    "NotificationGateway",
    "PersistenceError",
    "PropertyRepository",
    "RecordSource",
    "Repository",
    "RepositoryCollection",
    "SyncRepositories",
    "SyncUnitOfWork",
    "UnitOfWork",
    "ViolationRepository",
]
