"""Scheduled sync across the property registry.

Properties are handed to a small pool of workers through a queue. Each worker
paces itself between properties; with the default pool size of one this is a
strictly sequential loop. A failure in one property is logged and counted, never
propagated to the rest of the run.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from codewatch.domain.data_integration import resolve_authorities
from codewatch.domain.model import Authority, ScheduleType, new_id

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Collection
    from uuid import UUID

    from codewatch.domain.data_integration import PropertySyncResult, UnitOfWorkFactory
    from codewatch.domain.model import Property

log = getLogger(__name__)


class PropertyPipeline(Protocol):
    async def sync(
        self,
        prop: Property,
        *,
        authorities: Collection[Authority] | None = None,
        notify_on_new_critical: bool = True,
        sync_run_id: UUID | None = None,
    ) -> PropertySyncResult: ...


@dataclass(slots=True)
class RunSummary:
    """Aggregate counters for one orchestrator run."""

    schedule_type: ScheduleType
    total_properties: int = 0
    synced: int = 0
    errors: int = 0
    new_violations: int = 0
    changes_detected: int = 0

    def record(self, result: PropertySyncResult) -> None:
        self.synced += 1
        self.new_violations += result.new_violations
        self.changes_detected += result.changes_detected

    def as_dict(self) -> dict[str, object]:
        return {
            "total_properties": self.total_properties,
            "synced": self.synced,
            "errors": self.errors,
            "new_violations": self.new_violations,
            "changes_detected": self.changes_detected,
            "schedule_type": self.schedule_type.value,
        }


class PropertyLocks:
    """In-process advisory locks: one writer per property at a time.

    An entry lives only while some task holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._claims: dict[UUID, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, property_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.get(property_id)
        if lock is None:
            lock = self._locks[property_id] = asyncio.Lock()
        self._claims[property_id] = self._claims.get(property_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._claims[property_id] -= 1
            if not self._claims[property_id]:
                del self._claims[property_id]
                del self._locks[property_id]

    def is_locked(self, property_id: UUID) -> bool:
        lock = self._locks.get(property_id)
        return lock is not None and lock.locked()


@dataclass(slots=True)
class SyncOrchestrator:
    syncer: PropertyPipeline
    unit_of_work_factory: UnitOfWorkFactory
    jurisdiction: str = "NYC"
    quick_authorities: tuple[Authority, ...] = (Authority.DOB,)
    pacing_seconds: float = 0.5
    max_concurrency: int = 1
    locks: PropertyLocks = field(default_factory=PropertyLocks)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def run(self, schedule_type: ScheduleType = ScheduleType.NIGHTLY) -> RunSummary:
        summary = RunSummary(schedule_type=schedule_type)
        properties = await self._load_properties(schedule_type)
        summary.total_properties = len(properties)
        log.info(f"Starting {schedule_type} sync for {len(properties)} properties")

        queue: asyncio.Queue[Property] = asyncio.Queue()
        for prop in properties:
            queue.put_nowait(prop)

        run_id = new_id()
        worker_count = min(self.max_concurrency, len(properties))
        await asyncio.gather(
            *(self._worker(queue, summary, schedule_type, run_id) for _ in range(worker_count))
        )

        log.info(
            f"Finished {schedule_type} sync: total={summary.total_properties}, "
            f"synced={summary.synced}, errors={summary.errors}, "
            f"new_violations={summary.new_violations}, changes={summary.changes_detected}"
        )
        return summary

    async def _load_properties(self, schedule_type: ScheduleType) -> list[Property]:
        async with self.unit_of_work_factory() as uow:
            candidates = await uow.repositories.properties.list_syncable(self.jurisdiction)
        properties = [prop for prop in candidates if prop.is_syncable(self.jurisdiction)]
        if schedule_type is ScheduleType.DOB_QUICK:
            properties = [prop for prop in properties if self._authorities_for(prop, schedule_type)]
        return properties

    def _authorities_for(
        self, prop: Property, schedule_type: ScheduleType
    ) -> tuple[Authority, ...] | None:
        if schedule_type is ScheduleType.NIGHTLY:
            return None
        applicable = resolve_authorities(prop)
        return tuple(a for a in applicable if a in self.quick_authorities)

    async def _worker(
        self,
        queue: asyncio.Queue[Property],
        summary: RunSummary,
        schedule_type: ScheduleType,
        run_id: UUID,
    ) -> None:
        while True:
            try:
                prop = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            await self._sync_one(prop, summary, schedule_type, run_id)
            if not queue.empty() and self.pacing_seconds > 0:
                await self.sleep(self.pacing_seconds)

    async def _sync_one(
        self,
        prop: Property,
        summary: RunSummary,
        schedule_type: ScheduleType,
        run_id: UUID,
    ) -> None:
        try:
            async with self.locks.hold(prop.id):
                result = await self.syncer.sync(
                    prop,
                    authorities=self._authorities_for(prop, schedule_type),
                    sync_run_id=run_id,
                )
        except Exception:
            log.exception(f"Sync failed for property {prop.id}")
            summary.errors += 1
            return
        summary.record(result)
