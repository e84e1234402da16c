"""Application orchestration entry points."""

from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from codewatch.adapters.open_data import (
    build_application_sources,
    build_open_data_client,
    build_violation_sources,
)
from codewatch.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemySyncUnitOfWork,
    is_started,
    startup,
)
from codewatch.adapters.twilio import TwilioGateway
from codewatch.config import (
    MissingConfigurationError,
    get_open_data_config,
    get_sync_config,
    get_twilio_config,
)
from codewatch.domain.data_integration import PropertySyncer
from codewatch.domain.model import Authority, ScheduleType
from codewatch.domain.notifications import NotificationDispatcher
from codewatch.domain.orchestrator import PropertyLocks, SyncOrchestrator
from codewatch.domain.reconciliation import build_rules

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence
    from uuid import UUID

    from codewatch.config import OpenDataConfig, SyncConfig
    from codewatch.domain.data_integration import PropertySyncResult, UnitOfWorkFactory
    from codewatch.domain.orchestrator import RunSummary
    from codewatch.domain.ports.fetching import ApplicationSource, ViolationSource
    from codewatch.domain.ports.notifications import NotificationGateway

log = getLogger(__name__)

# Shared by manual and scheduled triggers running in the same process.
PROPERTY_LOCKS = PropertyLocks()


@dataclass(frozen=True, slots=True)
class SyncPropertyRequest:
    property_id: UUID
    applicable_authorities: tuple[Authority, ...] | None = None
    notify_on_new_critical: bool = True


@dataclass(frozen=True, slots=True)
class SyncPropertyResponse:
    success: bool
    total_found: int = 0
    new_violations: int = 0
    critical_count: int = 0
    authorities_synced: tuple[Authority, ...] = ()
    notification_sent: bool = False
    error: str | None = None

    @classmethod
    def from_result(cls, result: PropertySyncResult) -> SyncPropertyResponse:
        return cls(
            success=True,
            total_found=result.total_found,
            new_violations=result.new_violations,
            critical_count=result.critical_count,
            authorities_synced=result.authorities_synced,
            notification_sent=result.notification_sent,
        )

    @classmethod
    def failure(cls, error: str) -> SyncPropertyResponse:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, object]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "total_found": self.total_found,
            "new_violations": self.new_violations,
            "critical_count": self.critical_count,
            "authorities_synced": [authority.value for authority in self.authorities_synced],
            "notification_sent": self.notification_sent,
        }


def build_gateway() -> NotificationGateway | None:
    """Return the SMS gateway, or ``None`` when Twilio is not configured."""

    try:
        config = get_twilio_config()
    except MissingConfigurationError as exc:
        log.warning(f"SMS delivery disabled: {exc}")
        return None
    return TwilioGateway(config=config)


async def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        await startup()
    return SqlAlchemySyncUnitOfWork


@asynccontextmanager
async def _open_syncer(
    *,
    sync_config: SyncConfig,
    unit_of_work_factory: UnitOfWorkFactory,
    violation_sources: Sequence[ViolationSource] | None,
    application_sources: Sequence[ApplicationSource] | None,
    gateway: NotificationGateway | None,
    open_data_config: OpenDataConfig,
) -> AsyncIterator[PropertySyncer]:
    async with AsyncExitStack() as stack:
        if violation_sources is None or application_sources is None:
            client = await stack.enter_async_context(build_open_data_client(open_data_config))
            page_size = open_data_config.page_size
            if violation_sources is None:
                violation_sources = build_violation_sources(client, page_size=page_size)
            if application_sources is None:
                application_sources = build_application_sources(client, page_size=page_size)
        yield PropertySyncer(
            violation_sources=violation_sources,
            application_sources=application_sources,
            unit_of_work_factory=unit_of_work_factory,
            dispatcher=NotificationDispatcher(gateway),
            suppression_rules=build_rules(sync_config.suppression_thresholds),
            activity_violation_limit=sync_config.activity_violation_limit,
        )


async def sync_property(
    request: SyncPropertyRequest,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    violation_sources: Sequence[ViolationSource] | None = None,
    application_sources: Sequence[ApplicationSource] | None = None,
    gateway: NotificationGateway | None = None,
    sync_config: SyncConfig | None = None,
    open_data_config: OpenDataConfig | None = None,
    locks: PropertyLocks = PROPERTY_LOCKS,
) -> SyncPropertyResponse:
    """Sync one registered property on demand.

    Configuration problems raise before any work starts; everything after that is
    reported through ``SyncPropertyResponse.error``.
    """

    effective_config = sync_config or get_sync_config()
    effective_open_data = open_data_config or get_open_data_config()
    effective_gateway = gateway if gateway is not None else build_gateway()
    effective_uow = unit_of_work_factory or await _default_unit_of_work_factory()
    log.info(f"Manual sync requested for property {request.property_id}")

    try:
        async with effective_uow() as uow:
            prop = await uow.repositories.properties.get(request.property_id)
        if prop is None:
            return SyncPropertyResponse.failure(f"Property {request.property_id} not found")
        if not prop.is_syncable(effective_config.jurisdiction):
            return SyncPropertyResponse.failure(
                f"Property {request.property_id} has no building id "
                f"in jurisdiction {effective_config.jurisdiction}"
            )

        async with (
            _open_syncer(
                sync_config=effective_config,
                unit_of_work_factory=effective_uow,
                violation_sources=violation_sources,
                application_sources=application_sources,
                gateway=effective_gateway,
                open_data_config=effective_open_data,
            ) as syncer,
            locks.hold(prop.id),
        ):
            result = await syncer.sync(
                prop,
                authorities=request.applicable_authorities,
                notify_on_new_critical=request.notify_on_new_critical,
            )
    except Exception as exc:
        log.exception(f"Manual sync failed for property {request.property_id}")
        return SyncPropertyResponse.failure(str(exc))

    return SyncPropertyResponse.from_result(result)


async def run_scheduled_sync(
    schedule_type: ScheduleType = ScheduleType.NIGHTLY,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    violation_sources: Sequence[ViolationSource] | None = None,
    application_sources: Sequence[ApplicationSource] | None = None,
    gateway: NotificationGateway | None = None,
    sync_config: SyncConfig | None = None,
    open_data_config: OpenDataConfig | None = None,
    locks: PropertyLocks = PROPERTY_LOCKS,
) -> RunSummary:
    """Sync every eligible property in the registry."""

    effective_config = sync_config or get_sync_config()
    effective_open_data = open_data_config or get_open_data_config()
    effective_gateway = gateway if gateway is not None else build_gateway()
    effective_uow = unit_of_work_factory or await _default_unit_of_work_factory()

    async with _open_syncer(
        sync_config=effective_config,
        unit_of_work_factory=effective_uow,
        violation_sources=violation_sources,
        application_sources=application_sources,
        gateway=effective_gateway,
        open_data_config=effective_open_data,
    ) as syncer:
        orchestrator = SyncOrchestrator(
            syncer=syncer,
            unit_of_work_factory=effective_uow,
            jurisdiction=effective_config.jurisdiction,
            quick_authorities=tuple(Authority(name) for name in effective_config.quick_authorities),
            pacing_seconds=effective_config.pacing_seconds,
            max_concurrency=effective_config.max_concurrency,
            locks=locks,
        )
        return await orchestrator.run(schedule_type)
