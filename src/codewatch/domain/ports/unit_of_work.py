"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from codewatch.domain.ports.persistence import (
        ActivityLogRepository,
        ApplicationRepository,
        ChangeLogRepository,
        PropertyRepository,
        ViolationRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Async unit-of-work boundary around a repository collection.

    ``commit`` raises ``PersistenceError`` when the store rejects the pending writes;
    the session is rolled back and usable again afterwards.
    """

    @property
    def repositories(self) -> TRepositories: ...

    async def __aenter__(self) -> UnitOfWork[TRepositories]: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


@dataclass(slots=True)
class SyncRepositories(RepositoryCollection):
    """Repositories required by a property sync."""

    properties: PropertyRepository
    violations: ViolationRepository
    applications: ApplicationRepository
    change_log: ChangeLogRepository
    activity_log: ActivityLogRepository


type SyncUnitOfWork = UnitOfWork[SyncRepositories]
