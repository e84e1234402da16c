"""Canonical records produced by source adapters, before persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from codewatch.domain.model.enums import CriticalOrder, ViolationStatus

if TYPE_CHECKING:
    from datetime import date

    from codewatch.domain.model.enums import Authority, SourceDataset


@dataclass(frozen=True, slots=True)
class PropertyIdentifiers:
    building_id: str | None = None
    parcel_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ViolationRecord:
    authority: Authority
    source: SourceDataset
    violation_number: str
    issued_date: date
    hearing_date: date | None = None
    cure_by_date: date | None = None
    description: str | None = None
    severity: str | None = None
    violation_class: str | None = None
    penalty_amount: float | None = None
    respondent_name: str | None = None
    status: ViolationStatus = ViolationStatus.OPEN
    critical_orders: frozenset[CriticalOrder] = field(default_factory=frozenset)

    @property
    def number(self) -> str:
        return self.violation_number

    @property
    def is_critical(self) -> bool:
        return bool(self.critical_orders)


@dataclass(frozen=True, slots=True, kw_only=True)
class ApplicationRecord:
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

    @property
    def number(self) -> str:
        return self.application_number
