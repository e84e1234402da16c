"""Repository implementations backed by async SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select, update

from codewatch.adapters.sqlalchemy.mappings import (
    activity_log_table,
    application_table,
    change_log_table,
    property_table,
    violation_table,
)
from codewatch.domain.model import (
    ActivityLogEntry,
    Application,
    ChangeLogEntry,
    Property,
    Violation,
    ViolationStatus,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

UNKNOWN_STATUS = "unknown"


class SqlAlchemyPropertyRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def add(self, entity: Property) -> None:
        self.session.add(entity)

    async def get(self, property_id: UUID) -> Property | None:
        return await self.session.get(Property, property_id)

    async def list_syncable(self, jurisdiction: str) -> list[Property]:
        stmt = (
            select(Property)
            .where(property_table.c.jurisdiction == jurisdiction)
            .where(property_table.c.building_id.is_not(None))
            .where(property_table.c.building_id != "")
            .order_by(property_table.c.address)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_synced(self, property_id: UUID, synced_at: datetime) -> None:
        # the registry row belongs to the surrounding application; touch one column only
        stmt = (
            update(property_table)
            .where(property_table.c.id == property_id)
            .values(last_synced_at=synced_at)
        )
        await self.session.execute(stmt)


class SqlAlchemyViolationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def add(self, entity: Violation) -> None:
        self.session.add(entity)

    async def list_for_property(self, property_id: UUID) -> list[Violation]:
        stmt = (
            select(Violation)
            .where(violation_table.c.property_id == property_id)
            .order_by(violation_table.c.issued_date.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def status_snapshot(self, property_id: UUID) -> dict[str, str]:
        stmt = select(violation_table.c.violation_number, violation_table.c.status).where(
            violation_table.c.property_id == property_id
        )
        result = await self.session.execute(stmt)
        return {number: ViolationStatus(status).value for number, status in result.all()}

    async def list_open_active(self, property_id: UUID) -> list[Violation]:
        stmt = (
            select(Violation)
            .where(violation_table.c.property_id == property_id)
            .where(violation_table.c.status == ViolationStatus.OPEN)
            .where(violation_table.c._suppressed.is_(False))  # noqa: SLF001
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class SqlAlchemyApplicationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def add(self, entity: Application) -> None:
        self.session.add(entity)

    async def list_for_property(self, property_id: UUID) -> list[Application]:
        stmt = (
            select(Application)
            .where(application_table.c.property_id == property_id)
            .order_by(application_table.c.filing_date.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def status_snapshot(self, property_id: UUID) -> dict[str, str]:
        stmt = select(
            application_table.c.application_number, application_table.c.status
        ).where(application_table.c.property_id == property_id)
        result = await self.session.execute(stmt)
        return {number: status or UNKNOWN_STATUS for number, status in result.all()}


class SqlAlchemyChangeLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def add(self, entity: ChangeLogEntry) -> None:
        self.session.add(entity)

    def add_all(self, entries: Sequence[ChangeLogEntry]) -> None:
        self.session.add_all(entries)

    async def list_for_property(self, property_id: UUID) -> list[ChangeLogEntry]:
        stmt = (
            select(ChangeLogEntry)
            .where(change_log_table.c.property_id == property_id)
            .order_by(change_log_table.c.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class SqlAlchemyActivityLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def add(self, entity: ActivityLogEntry) -> None:
        self.session.add(entity)

    def add_all(self, entries: Sequence[ActivityLogEntry]) -> None:
        self.session.add_all(entries)

    async def list_for_property(self, property_id: UUID) -> list[ActivityLogEntry]:
        stmt = (
            select(ActivityLogEntry)
            .where(activity_log_table.c.property_id == property_id)
            .order_by(activity_log_table.c.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


if TYPE_CHECKING:
    from codewatch.domain.ports.persistence import (
        ActivityLogRepository,
        ApplicationRepository,
        ChangeLogRepository,
        PropertyRepository,
        ViolationRepository,
    )

    def _check(session: AsyncSession) -> None:
        _properties: PropertyRepository = SqlAlchemyPropertyRepository(session)
        _violations: ViolationRepository = SqlAlchemyViolationRepository(session)
        _applications: ApplicationRepository = SqlAlchemyApplicationRepository(session)
        _change_log: ChangeLogRepository = SqlAlchemyChangeLogRepository(session)
        _activity_log: ActivityLogRepository = SqlAlchemyActivityLogRepository(session)
