"""Per-property sync pipeline: fetch, deduplicate, persist, diff, suppress, notify, log."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from codewatch.domain.model import (
    ActivityLogEntry,
    ActivityType,
    Application,
    Authority,
    EntityKind,
    PropertyIdentifiers,
    Violation,
    new_id,
    utcnow,
)
from codewatch.domain.notifications import SyncOutcome
from codewatch.domain.ports.persistence import PersistenceError
from codewatch.domain.reconciliation import (
    apply_suppression,
    build_change_log_entries,
    deduplicate,
    diff_snapshots,
    precedence_rank,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Mapping, Sequence
    from datetime import datetime
    from uuid import UUID

    from codewatch.domain.model import (
        ApplicationRecord,
        Property,
        ViolationRecord,
    )
    from codewatch.domain.notifications import NotificationDispatcher
    from codewatch.domain.ports.fetching import ApplicationSource, RecordSource, ViolationSource
    from codewatch.domain.ports.persistence import ApplicationRepository, ViolationRepository
    from codewatch.domain.ports.unit_of_work import SyncUnitOfWork
    from codewatch.domain.reconciliation import SuppressionRule

type UnitOfWorkFactory = Callable[[], SyncUnitOfWork]
type Clock = Callable[[], datetime]

log = getLogger(__name__)

DEFAULT_AUTHORITIES: tuple[Authority, ...] = (Authority.DOB, Authority.ECB)
DEFAULT_ACTIVITY_VIOLATION_LIMIT = 5
_ACTIVITY_DESCRIPTION_PREVIEW = 200


@dataclass(slots=True)
class PropertySyncResult:
    """Outcome of syncing a single property."""

    property_id: UUID
    authorities_synced: tuple[Authority, ...] = ()
    total_found: int = 0
    new_violations: int = 0
    new_applications: int = 0
    critical_count: int = 0
    changes_detected: int = 0
    suppressed: int = 0
    notification_sent: bool = False


def resolve_authorities(
    prop: Property,
    requested: Collection[Authority] | None = None,
) -> tuple[Authority, ...]:
    """Return the authorities to sync, in declaration order.

    An explicit request wins over the property's own list; a property with no list
    falls back to ``DEFAULT_AUTHORITIES``.
    """

    chosen = set(requested) if requested is not None else set(prop.applicable_authorities)
    if requested is None and not chosen:
        chosen = set(DEFAULT_AUTHORITIES)
    return tuple(authority for authority in Authority if authority in chosen)


async def fetch_all[TRecord](
    sources: Sequence[RecordSource[TRecord]],
    identifiers: PropertyIdentifiers,
) -> list[list[TRecord]]:
    """Fan out to every source concurrently; batches come back in precedence order."""

    ordered = sorted(sources, key=lambda source: precedence_rank(source.dataset))
    results = await asyncio.gather(
        *(source.fetch(identifiers) for source in ordered),
        return_exceptions=True,
    )
    batches: list[list[TRecord]] = []
    for source, result in zip(ordered, results, strict=True):
        if isinstance(result, Exception):
            log.warning(f"Source {source.dataset} failed, treating as empty: {result!r}")
            batches.append([])
        elif isinstance(result, BaseException):
            raise result
        else:
            batches.append(result)
    return batches


async def _persist_violations(
    repository: ViolationRepository,
    property_id: UUID,
    records: Sequence[ViolationRecord],
    now: datetime,
) -> list[Violation]:
    existing = {v.violation_number: v for v in await repository.list_for_property(property_id)}
    inserted: list[Violation] = []
    for record in records:
        current = existing.get(record.violation_number)
        if current is None:
            violation = Violation.from_record(record, property_id=property_id, synced_at=now)
            repository.add(violation)
            existing[record.violation_number] = violation
            inserted.append(violation)
            continue
        current.apply_upstream_status(record.status, synced_at=now)
    return inserted


async def _persist_applications(
    repository: ApplicationRepository,
    property_id: UUID,
    records: Sequence[ApplicationRecord],
    now: datetime,
) -> list[Application]:
    existing = {
        a.application_number: a for a in await repository.list_for_property(property_id)
    }
    inserted: list[Application] = []
    for record in records:
        current = existing.get(record.application_number)
        if current is None:
            application = Application.from_record(record, property_id=property_id, synced_at=now)
            repository.add(application)
            existing[record.application_number] = application
            inserted.append(application)
            continue
        current.apply_upstream_status(record.status, synced_at=now)
    return inserted


@dataclass(slots=True)
class PropertySyncer:
    """Runs the full sync pipeline for one property inside one unit of work."""

    violation_sources: Sequence[ViolationSource]
    unit_of_work_factory: UnitOfWorkFactory
    dispatcher: NotificationDispatcher
    application_sources: Sequence[ApplicationSource] = ()
    suppression_rules: Mapping[Authority, SuppressionRule] = field(default_factory=dict)
    activity_violation_limit: int = DEFAULT_ACTIVITY_VIOLATION_LIMIT
    clock: Clock = utcnow

    async def sync(
        self,
        prop: Property,
        *,
        authorities: Collection[Authority] | None = None,
        notify_on_new_critical: bool = True,
        sync_run_id: UUID | None = None,
    ) -> PropertySyncResult:
        run_id = sync_run_id or new_id()
        selected = resolve_authorities(prop, authorities)
        result = PropertySyncResult(property_id=prop.id, authorities_synced=selected)
        identifiers = PropertyIdentifiers(building_id=prop.building_id, parcel_id=prop.parcel_id)

        violation_batches, application_batches = await asyncio.gather(
            fetch_all(_for_authorities(self.violation_sources, selected), identifiers),
            fetch_all(_for_authorities(self.application_sources, selected), identifiers),
        )
        violation_records = deduplicate(violation_batches)
        application_records = deduplicate(application_batches)
        result.total_found = len(violation_records)
        now = self.clock()

        async with self.unit_of_work_factory() as uow:
            repos = uow.repositories

            violations_before = await repos.violations.status_snapshot(prop.id)
            applications_before = await repos.applications.status_snapshot(prop.id)

            new_violations = await _persist_violations(
                repos.violations, prop.id, violation_records, now
            )
            new_applications = await _persist_applications(
                repos.applications, prop.id, application_records, now
            )
            await uow.commit()
            result.new_violations = len(new_violations)
            result.new_applications = len(new_applications)
            result.critical_count = sum(1 for v in new_violations if v.is_critical)
            # built before later commits can roll back and expire the new rows
            violation_entries = self._violation_entries(prop, new_violations)

            violations_after = await repos.violations.status_snapshot(prop.id)
            applications_after = await repos.applications.status_snapshot(prop.id)
            events = [
                *diff_snapshots(violations_before, violations_after, kind=EntityKind.VIOLATION),
                *diff_snapshots(
                    applications_before, applications_after, kind=EntityKind.APPLICATION
                ),
            ]
            if events:
                violations = await repos.violations.list_for_property(prop.id)
                applications = await repos.applications.list_for_property(prop.id)
                changes = build_change_log_entries(
                    events,
                    property_id=prop.id,
                    user_id=prop.owner_id,
                    violations={v.violation_number: v for v in violations},
                    applications={a.application_number: a for a in applications},
                    created_at=now,
                )
                repos.change_log.add_all(changes)
                try:
                    await uow.commit()
                except PersistenceError:
                    log.exception(f"Failed to record {len(changes)} change(s) for {prop.id}")
                else:
                    result.changes_detected = len(changes)

            open_violations = await repos.violations.list_open_active(prop.id)
            suppressed = apply_suppression(open_violations, self.suppression_rules, today=now.date())
            await repos.properties.mark_synced(prop.id, now)
            try:
                await uow.commit()
                result.suppressed = len(suppressed)
            except PersistenceError:
                log.exception(f"Failed to persist suppression for {prop.id}")

            outcome = SyncOutcome(
                address=prop.address,
                new_violations=result.new_violations,
                critical_count=result.critical_count,
                authorities=selected,
            )
            dispatch = await self.dispatcher.dispatch(
                prop,
                outcome,
                sync_run_id=run_id,
                notify_on_new_critical=notify_on_new_critical,
            )
            result.notification_sent = dispatch is not None and dispatch.outcome.delivered

            activity = [self._sync_entry(prop, result), *violation_entries]
            if dispatch is not None:
                activity.append(dispatch.activity_entry())
            repos.activity_log.add_all(activity)
            try:
                await uow.commit()
            except PersistenceError:
                log.exception(f"Failed to record activity for {prop.id}")

        log.info(
            f"Synced property {prop.id}: found={result.total_found}, "
            f"new={result.new_violations}, changes={result.changes_detected}, "
            f"suppressed={result.suppressed}, notified={result.notification_sent}"
        )
        return result

    def _sync_entry(self, prop: Property, result: PropertySyncResult) -> ActivityLogEntry:
        count = result.new_violations
        plural = "s" if count != 1 else ""
        return ActivityLogEntry(
            property_id=prop.id,
            activity_type=ActivityType.SYNC,
            title="Violation Sync Completed",
            description=(
                f"Found {count} new violation{plural} from NYC Open Data"
                if count
                else "No new violations found"
            ),
            details={
                "authorities_synced": [a.value for a in result.authorities_synced],
                "total_found": result.total_found,
                "new_violations": count,
                "critical_count": result.critical_count,
                "changes_detected": result.changes_detected,
            },
        )

    def _violation_entries(
        self, prop: Property, new_violations: Sequence[Violation]
    ) -> list[ActivityLogEntry]:
        # bounded so a first sync of a busy building does not flood the log
        return [
            ActivityLogEntry(
                property_id=prop.id,
                activity_type=ActivityType.VIOLATION_ADDED,
                title=f"New {violation.authority.value} Violation",
                description=(
                    violation.description[:_ACTIVITY_DESCRIPTION_PREVIEW]
                    if violation.description
                    else f"Violation #{violation.violation_number}"
                ),
                details={
                    "violation_number": violation.violation_number,
                    "authority": violation.authority.value,
                    "is_critical": violation.is_critical,
                },
            )
            for violation in new_violations[: self.activity_violation_limit]
        ]


def _for_authorities[TRecord](
    sources: Sequence[RecordSource[TRecord]],
    authorities: Collection[Authority],
) -> list[RecordSource[TRecord]]:
    return [source for source in sources if source.authority in authorities]
