"""SQLAlchemy repositories against a migrated SQLite database."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from codewatch.adapters.sqlalchemy.unit_of_work import SqlAlchemySyncUnitOfWork, StartupError
from codewatch.domain.model import (
    ActivityLogEntry,
    ActivityType,
    Application,
    Authority,
    NotificationSettings,
    SourceDataset,
    Violation,
    ViolationStatus,
)
from codewatch.domain.ports.persistence import PersistenceError
from tests.helpers.records import SYNC_TIME, make_property

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from codewatch.domain.model import Property

type UowFactory = Callable[[], SqlAlchemySyncUnitOfWork]


def _violation(property_id: UUID, number: str, **kwargs: object) -> Violation:
    return Violation(
        property_id=property_id,
        authority=Authority.DOB,
        source=SourceDataset.DOB_NOW,
        violation_number=number,
        issued_date=date(2024, 1, 15),
        **kwargs,  # type: ignore[arg-type]
    )


async def _store_property(factory: UowFactory, prop: Property) -> Property:
    async with factory() as uow:
        uow.repositories.properties.add(prop)
        await uow.commit()
    return prop


@pytest.mark.asyncio
async def test_property_round_trips_settings_and_authorities(
    sqlite_unit_of_work: UowFactory,
) -> None:
    prop = await _store_property(
        sqlite_unit_of_work,
        make_property(authorities=(Authority.HPD, Authority.DOB), contact="(212) 555-0000"),
    )

    async with sqlite_unit_of_work() as uow:
        loaded = await uow.repositories.properties.get(prop.id)

    assert loaded is not None
    assert loaded.applicable_authorities == {Authority.DOB, Authority.HPD}
    assert loaded.notifications == NotificationSettings(
        alerts_enabled=True, contact="(212) 555-0000"
    )
    assert loaded.last_synced_at is None


@pytest.mark.asyncio
async def test_list_syncable_filters_jurisdiction_and_building_id(
    sqlite_unit_of_work: UowFactory,
) -> None:
    for prop in (
        make_property(address="B Street"),
        make_property(address="A Avenue"),
        make_property(address="No Bin", building_id=None),
        make_property(address="Blank Bin", building_id=""),
        make_property(address="Elsewhere", jurisdiction="LA"),
    ):
        await _store_property(sqlite_unit_of_work, prop)

    async with sqlite_unit_of_work() as uow:
        syncable = await uow.repositories.properties.list_syncable("NYC")

    assert [prop.address for prop in syncable] == ["A Avenue", "B Street"]


@pytest.mark.asyncio
async def test_mark_synced_only_touches_the_timestamp(sqlite_unit_of_work: UowFactory) -> None:
    prop = await _store_property(sqlite_unit_of_work, make_property())

    async with sqlite_unit_of_work() as uow:
        await uow.repositories.properties.mark_synced(prop.id, SYNC_TIME)
        await uow.commit()

    async with sqlite_unit_of_work() as uow:
        loaded = await uow.repositories.properties.get(prop.id)

    assert loaded is not None
    assert loaded.last_synced_at == SYNC_TIME
    assert loaded.address == prop.address


@pytest.mark.asyncio
async def test_violation_snapshot_and_open_active_listing(sqlite_unit_of_work: UowFactory) -> None:
    prop = await _store_property(sqlite_unit_of_work, make_property())
    stale = _violation(prop.id, "OLD", is_stop_work_order=True)
    stale.suppress_stale("Open 1460 days (4 years old)")

    async with sqlite_unit_of_work() as uow:
        uow.repositories.violations.add(_violation(prop.id, "OPEN"))
        uow.repositories.violations.add(
            _violation(prop.id, "DONE", status=ViolationStatus.CLOSED)
        )
        uow.repositories.violations.add(stale)
        await uow.commit()

    async with sqlite_unit_of_work() as uow:
        snapshot = await uow.repositories.violations.status_snapshot(prop.id)
        open_active = await uow.repositories.violations.list_open_active(prop.id)
        everything = await uow.repositories.violations.list_for_property(prop.id)

    assert snapshot == {"OPEN": "open", "DONE": "closed", "OLD": "open"}
    assert [v.violation_number for v in open_active] == ["OPEN"]
    reloaded = next(v for v in everything if v.violation_number == "OLD")
    assert reloaded.is_suppressed
    assert reloaded.is_stop_work_order
    assert reloaded.suppression.reason == "Open 1460 days (4 years old)"  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_application_snapshot_reports_unknown_status(
    sqlite_unit_of_work: UowFactory,
) -> None:
    prop = await _store_property(sqlite_unit_of_work, make_property())

    async with sqlite_unit_of_work() as uow:
        uow.repositories.applications.add(
            Application(
                property_id=prop.id,
                authority=Authority.DOB,
                source=SourceDataset.DOB_BIS_JOBS,
                application_number="121234567",
            )
        )
        await uow.commit()
        snapshot = await uow.repositories.applications.status_snapshot(prop.id)

    assert snapshot == {"121234567": "unknown"}


@pytest.mark.asyncio
async def test_duplicate_violation_commit_raises_persistence_error(
    sqlite_unit_of_work: UowFactory,
) -> None:
    prop = await _store_property(sqlite_unit_of_work, make_property())

    async with sqlite_unit_of_work() as uow:
        uow.repositories.violations.add(_violation(prop.id, "DUP"))
        uow.repositories.violations.add(_violation(prop.id, "DUP"))
        with pytest.raises(PersistenceError):
            await uow.commit()

        # the session is usable again after the rejected commit
        assert await uow.repositories.violations.status_snapshot(prop.id) == {}


@pytest.mark.asyncio
async def test_activity_log_persists_metadata(sqlite_unit_of_work: UowFactory) -> None:
    prop = await _store_property(sqlite_unit_of_work, make_property())

    async with sqlite_unit_of_work() as uow:
        uow.repositories.activity_log.add_all(
            [
                ActivityLogEntry(
                    property_id=prop.id,
                    activity_type=ActivityType.SYNC,
                    title="Violation Sync Completed",
                    details={"authorities_synced": ["DOB"], "new_violations": 2},
                )
            ]
        )
        await uow.commit()

    async with sqlite_unit_of_work() as uow:
        entries = await uow.repositories.activity_log.list_for_property(prop.id)

    assert len(entries) == 1
    assert entries[0].details == {"authorities_synced": ["DOB"], "new_violations": 2}
    assert entries[0].created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemySyncUnitOfWork()
