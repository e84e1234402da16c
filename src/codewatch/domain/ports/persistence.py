"""Ports for persisting sync state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from codewatch.domain.model import (
    ActivityLogEntry,
    Application,
    ChangeLogEntry,
    Property,
    Violation,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID


class PersistenceError(RuntimeError):
    """Raised by a unit of work when the backing store rejects a write."""


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class PropertyRepository(Repository[Property], Protocol):
    """Read access to the property registry plus the last-synced marker."""

    async def get(self, property_id: UUID) -> Property | None: ...

    async def list_syncable(self, jurisdiction: str) -> list[Property]: ...

    async def mark_synced(self, property_id: UUID, synced_at: datetime) -> None: ...


@runtime_checkable
class ViolationRepository(Repository[Violation], Protocol):
    """Persistence contract for canonical violations."""

    async def list_for_property(self, property_id: UUID) -> list[Violation]: ...

    async def status_snapshot(self, property_id: UUID) -> dict[str, str]: ...

    async def list_open_active(self, property_id: UUID) -> list[Violation]: ...


@runtime_checkable
class ApplicationRepository(Repository[Application], Protocol):
    """Persistence contract for permit applications."""

    async def list_for_property(self, property_id: UUID) -> list[Application]: ...

    async def status_snapshot(self, property_id: UUID) -> dict[str, str]: ...


@runtime_checkable
class ChangeLogRepository(Repository[ChangeLogEntry], Protocol):
    """Append-only change log."""

    def add_all(self, entries: Sequence[ChangeLogEntry]) -> None: ...

    async def list_for_property(self, property_id: UUID) -> list[ChangeLogEntry]: ...


@runtime_checkable
class ActivityLogRepository(Repository[ActivityLogEntry], Protocol):
    """Append-only activity log."""

    def add_all(self, entries: Sequence[ActivityLogEntry]) -> None: ...

    async def list_for_property(self, property_id: UUID) -> list[ActivityLogEntry]: ...


__all__ = [
    "ActivityLogRepository",
    "ApplicationRepository",
    "ChangeLogRepository",
    "PersistenceError",
    "PropertyRepository",
    "Repository",
    "ViolationRepository",
]
