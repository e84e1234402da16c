"""Canonical violation entity and its suppression state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from codewatch.domain.model.base import Entity
from codewatch.domain.model.enums import CriticalOrder, ViolationStatus

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID

    from codewatch.domain.model.enums import Authority, SourceDataset
    from codewatch.domain.model.records import ViolationRecord


@dataclass(frozen=True, slots=True)
class Active:
    """Violation is reported as-is; no heuristic has been applied."""


@dataclass(frozen=True, slots=True)
class SuppressedStale:
    """Violation is presumed resolved upstream because of its age.

    Distinct from an authority-confirmed closure, which is carried by ``status``.
    """

    reason: str


type SuppressionState = Active | SuppressedStale

ACTIVE = Active()


class SuppressionError(ValueError):
    """Raised when a suppression transition is not allowed."""


@dataclass(eq=False, kw_only=True)
class Violation(Entity):
    property_id: UUID
    authority: Authority
    source: SourceDataset
    violation_number: str
    issued_date: date | None = None
    hearing_date: date | None = None
    cure_by_date: date | None = None
    description: str | None = None
    severity: str | None = None
    violation_class: str | None = None
    is_stop_work_order: bool = False
    is_vacate_order: bool = False
    penalty_amount: float | None = None
    respondent_name: str | None = None
    status: ViolationStatus = ViolationStatus.OPEN
    notes: str | None = None
    synced_at: datetime | None = None

    # persisted as a flag + reason, exposed only through ``suppression``
    _suppressed: bool = False
    _suppression_reason: str | None = None

    @classmethod
    def from_record(
        cls,
        record: ViolationRecord,
        *,
        property_id: UUID,
        synced_at: datetime,
    ) -> Violation:
        return cls(
            property_id=property_id,
            authority=record.authority,
            source=record.source,
            violation_number=record.violation_number,
            issued_date=record.issued_date,
            hearing_date=record.hearing_date,
            cure_by_date=record.cure_by_date,
            description=record.description,
            severity=record.severity,
            violation_class=record.violation_class,
            is_stop_work_order=CriticalOrder.STOP_WORK in record.critical_orders,
            is_vacate_order=CriticalOrder.VACATE in record.critical_orders,
            penalty_amount=record.penalty_amount,
            respondent_name=record.respondent_name,
            status=record.status,
            synced_at=synced_at,
        )

    @property
    def suppression(self) -> SuppressionState:
        if self._suppressed:
            return SuppressedStale(reason=self._suppression_reason or "")
        return ACTIVE

    @property
    def is_suppressed(self) -> bool:
        return self._suppressed

    def suppress_stale(self, reason: str) -> None:
        """Mark as presumed stale. There is no transition back to ``Active``."""

        if self._suppressed:
            raise SuppressionError(f"Violation {self.violation_number} is already suppressed")
        self._suppressed = True
        self._suppression_reason = reason

    @property
    def critical_orders(self) -> frozenset[CriticalOrder]:
        orders: set[CriticalOrder] = set()
        if self.is_stop_work_order:
            orders.add(CriticalOrder.STOP_WORK)
        if self.is_vacate_order:
            orders.add(CriticalOrder.VACATE)
        return frozenset(orders)

    @property
    def is_critical(self) -> bool:
        return self.is_stop_work_order or self.is_vacate_order

    @property
    def is_open_and_active(self) -> bool:
        return self.status == ViolationStatus.OPEN and not self._suppressed

    def apply_upstream_status(self, status: ViolationStatus, *, synced_at: datetime) -> bool:
        """Record the status reported upstream; return whether it changed."""

        self.synced_at = synced_at
        if self.status == status:
            return False
        self.status = status
        return True
