"""Factories for properties and canonical records used across the test suite."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from codewatch.domain.model import (
    ApplicationRecord,
    Authority,
    CriticalOrder,
    NotificationSettings,
    Property,
    SourceDataset,
    ViolationRecord,
    ViolationStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

SYNC_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

_DEFAULT_SOURCE_FOR: dict[Authority, SourceDataset] = {
    Authority.DOB: SourceDataset.DOB_NOW,
    Authority.ECB: SourceDataset.ECB,
    Authority.HPD: SourceDataset.HPD,
    Authority.FDNY: SourceDataset.FDNY,
}


def make_property(
    *,
    address: str = "123 Main St, New York, NY",
    building_id: str | None = "1000001",
    parcel_id: str | None = "1000010001",
    authorities: Iterable[Authority] = (Authority.DOB, Authority.ECB),
    alerts_enabled: bool = True,
    contact: str | None = "(212) 555-1234",
    jurisdiction: str = "NYC",
) -> Property:
    return Property(
        address=address,
        jurisdiction=jurisdiction,
        building_id=building_id,
        parcel_id=parcel_id,
        applicable_authorities=set(authorities),
        notifications=NotificationSettings(alerts_enabled=alerts_enabled, contact=contact),
    )


def make_violation_record(
    number: str,
    *,
    authority: Authority = Authority.DOB,
    source: SourceDataset | None = None,
    issued: date = date(2024, 1, 15),
    status: ViolationStatus = ViolationStatus.OPEN,
    orders: Iterable[CriticalOrder] = (),
    description: str | None = None,
) -> ViolationRecord:
    return ViolationRecord(
        authority=authority,
        source=source or _DEFAULT_SOURCE_FOR[authority],
        violation_number=number,
        issued_date=issued,
        description=description,
        status=status,
        critical_orders=frozenset(orders),
    )


def make_application_record(
    number: str,
    *,
    source: SourceDataset = SourceDataset.DOB_BIS_JOBS,
    status: str | None = "Filed",
    application_type: str | None = "A2",
) -> ApplicationRecord:
    return ApplicationRecord(
        authority=Authority.DOB,
        source=source,
        application_number=number,
        application_type=application_type,
        status=status,
    )


def fixed_clock(moment: datetime = SYNC_TIME) -> Callable[[], datetime]:
    def clock() -> datetime:
        return moment

    return clock
