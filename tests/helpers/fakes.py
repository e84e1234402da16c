"""In-memory implementations of the sync ports for testing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from codewatch.domain.model import (
    ActivityLogEntry,
    Application,
    Authority,
    ChangeLogEntry,
    DeliveryOutcome,
    Property,
    SourceDataset,
    Violation,
    ViolationStatus,
)
from codewatch.domain.ports.persistence import PersistenceError
from codewatch.domain.ports.unit_of_work import SyncRepositories

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from types import TracebackType
    from uuid import UUID

    from codewatch.domain.model import NotificationRequest, PropertyIdentifiers


@dataclass
class FakeSource[TRecord]:
    """Record source returning canned records, or raising ``error`` when set."""

    authority: Authority
    dataset: SourceDataset
    records: list[TRecord] = field(default_factory=list)
    error: Exception | None = None
    calls: list[PropertyIdentifiers] = field(default_factory=list)

    async def fetch(self, identifiers: PropertyIdentifiers) -> list[TRecord]:
        self.calls.append(identifiers)
        if self.error is not None:
            raise self.error
        return list(self.records)


@dataclass
class FakeGateway:
    outcome: DeliveryOutcome = field(default_factory=lambda: DeliveryOutcome.sent("SM123"))
    error: Exception | None = None
    requests: list[NotificationRequest] = field(default_factory=list)

    async def send(self, request: NotificationRequest) -> DeliveryOutcome:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.outcome


@dataclass
class InMemoryStore:
    """Committed state shared by every unit of work created from one factory."""

    properties: dict[UUID, Property] = field(default_factory=dict)
    violations: list[Violation] = field(default_factory=list)
    applications: list[Application] = field(default_factory=list)
    change_log: list[ChangeLogEntry] = field(default_factory=list)
    activity_log: list[ActivityLogEntry] = field(default_factory=list)
    commits: int = 0
    # 1-based commit numbers that should be rejected
    failing_commits: set[int] = field(default_factory=set)

    def unit_of_work(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self)

    def violations_for(self, property_id: UUID) -> list[Violation]:
        return [v for v in self.violations if v.property_id == property_id]


class _Pending:
    def __init__(self) -> None:
        self.items: list[object] = []


class InMemoryPropertyRepository:
    def __init__(self, store: InMemoryStore, pending: _Pending) -> None:
        self.store = store
        self.pending = pending

    def add(self, entity: Property) -> None:
        self.pending.items.append(entity)

    async def get(self, property_id: UUID) -> Property | None:
        return self.store.properties.get(property_id)

    async def list_syncable(self, jurisdiction: str) -> list[Property]:
        return [
            prop
            for prop in self.store.properties.values()
            if prop.jurisdiction == jurisdiction and prop.building_id
        ]

    async def mark_synced(self, property_id: UUID, synced_at: datetime) -> None:
        prop = self.store.properties.get(property_id)
        if prop is not None:
            prop.last_synced_at = synced_at


class InMemoryViolationRepository:
    def __init__(self, store: InMemoryStore, pending: _Pending) -> None:
        self.store = store
        self.pending = pending

    def add(self, entity: Violation) -> None:
        self.pending.items.append(entity)

    async def list_for_property(self, property_id: UUID) -> list[Violation]:
        pending = [
            item
            for item in self.pending.items
            if isinstance(item, Violation) and item.property_id == property_id
        ]
        return self.store.violations_for(property_id) + pending

    async def status_snapshot(self, property_id: UUID) -> dict[str, str]:
        return {
            v.violation_number: v.status.value for v in await self.list_for_property(property_id)
        }

    async def list_open_active(self, property_id: UUID) -> list[Violation]:
        return [
            v
            for v in self.store.violations_for(property_id)
            if v.status == ViolationStatus.OPEN and not v.is_suppressed
        ]


class InMemoryApplicationRepository:
    def __init__(self, store: InMemoryStore, pending: _Pending) -> None:
        self.store = store
        self.pending = pending

    def add(self, entity: Application) -> None:
        self.pending.items.append(entity)

    async def list_for_property(self, property_id: UUID) -> list[Application]:
        stored = [a for a in self.store.applications if a.property_id == property_id]
        pending = [
            item
            for item in self.pending.items
            if isinstance(item, Application) and item.property_id == property_id
        ]
        return stored + pending

    async def status_snapshot(self, property_id: UUID) -> dict[str, str]:
        return {
            a.application_number: a.status or "unknown"
            for a in await self.list_for_property(property_id)
        }


class InMemoryChangeLogRepository:
    def __init__(self, store: InMemoryStore, pending: _Pending) -> None:
        self.store = store
        self.pending = pending

    def add(self, entity: ChangeLogEntry) -> None:
        self.pending.items.append(entity)

    def add_all(self, entries: Sequence[ChangeLogEntry]) -> None:
        self.pending.items.extend(entries)

    async def list_for_property(self, property_id: UUID) -> list[ChangeLogEntry]:
        return [e for e in self.store.change_log if e.property_id == property_id]


class InMemoryActivityLogRepository:
    def __init__(self, store: InMemoryStore, pending: _Pending) -> None:
        self.store = store
        self.pending = pending

    def add(self, entity: ActivityLogEntry) -> None:
        self.pending.items.append(entity)

    def add_all(self, entries: Sequence[ActivityLogEntry]) -> None:
        self.pending.items.extend(entries)

    async def list_for_property(self, property_id: UUID) -> list[ActivityLogEntry]:
        return [e for e in self.store.activity_log if e.property_id == property_id]


class InMemoryUnitOfWork:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self._pending = _Pending()
        self._repositories = SyncRepositories(
            properties=InMemoryPropertyRepository(store, self._pending),
            violations=InMemoryViolationRepository(store, self._pending),
            applications=InMemoryApplicationRepository(store, self._pending),
            change_log=InMemoryChangeLogRepository(store, self._pending),
            activity_log=InMemoryActivityLogRepository(store, self._pending),
        )

    @property
    def repositories(self) -> SyncRepositories:
        return self._repositories

    async def __aenter__(self) -> InMemoryUnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        await self.rollback()
        return False

    async def commit(self) -> None:
        self.store.commits += 1
        if self.store.commits in self.store.failing_commits:
            await self.rollback()
            raise PersistenceError(f"commit {self.store.commits} rejected")
        for item in self._pending.items:
            match item:
                case Property():
                    self.store.properties[item.id] = item
                case Violation():
                    self.store.violations.append(item)
                case Application():
                    self.store.applications.append(item)
                case ChangeLogEntry():
                    self.store.change_log.append(item)
                case ActivityLogEntry():
                    self.store.activity_log.append(item)
                case _:
                    raise TypeError(f"Unsupported entity {item!r}")
        self._pending.items.clear()

    async def rollback(self) -> None:
        self._pending.items.clear()


def sources_for[TRecord](**records: Sequence[TRecord]) -> list[FakeSource[TRecord]]:
    """Build one fake source per dataset name, e.g. ``dob_now=[...]``."""

    sources: list[FakeSource[TRecord]] = []
    for name, items in records.items():
        dataset = SourceDataset(name)
        sources.append(
            FakeSource(authority=_AUTHORITY_FOR[dataset], dataset=dataset, records=list(items))
        )
    return sources


_AUTHORITY_FOR: dict[SourceDataset, Authority] = {
    SourceDataset.DOB_LEGACY: Authority.DOB,
    SourceDataset.DOB_NOW: Authority.DOB,
    SourceDataset.ECB: Authority.ECB,
    SourceDataset.HPD: Authority.HPD,
    SourceDataset.FDNY: Authority.FDNY,
    SourceDataset.DOB_BIS_JOBS: Authority.DOB,
    SourceDataset.DOB_NOW_BUILD: Authority.DOB,
}
