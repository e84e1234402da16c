"""Permit / job filing entity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from codewatch.domain.model.base import Entity

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID

    from codewatch.domain.model.enums import Authority, SourceDataset
    from codewatch.domain.model.records import ApplicationRecord


@dataclass(eq=False, kw_only=True)
class Application(Entity):
    property_id: UUID
    authority: Authority
    source: SourceDataset
    application_number: str
    application_type: str | None = None
    work_type: str | None = None
    description: str | None = None
    status: str | None = None
    filing_date: date | None = None
    approval_date: date | None = None
    expiration_date: date | None = None
    estimated_cost: float | None = None
    synced_at: datetime | None = None

    @classmethod
    def from_record(
        cls,
        record: ApplicationRecord,
        *,
        property_id: UUID,
        synced_at: datetime,
    ) -> Application:
        return cls(
            property_id=property_id,
            authority=record.authority,
            source=record.source,
            application_number=record.application_number,
            application_type=record.application_type,
            work_type=record.work_type,
            description=record.description,
            status=record.status,
            filing_date=record.filing_date,
            approval_date=record.approval_date,
            expiration_date=record.expiration_date,
            estimated_cost=record.estimated_cost,
            synced_at=synced_at,
        )

    def apply_upstream_status(self, status: str | None, *, synced_at: datetime) -> bool:
        self.synced_at = synced_at
        if self.status == status:
            return False
        self.status = status
        return True
