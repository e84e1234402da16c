"""Outbound alert request and the outcome the delivery gateway reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from codewatch.domain.model.enums import DeliveryStatus

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class NotificationRequest:
    contact: str
    body: str
    property_id: UUID
    sync_run_id: UUID


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    status: DeliveryStatus
    provider_message_id: str | None = None
    error: str | None = None

    @classmethod
    def sent(cls, provider_message_id: str | None = None) -> DeliveryOutcome:
        return cls(DeliveryStatus.SENT, provider_message_id=provider_message_id)

    @classmethod
    def failed(cls, error: str) -> DeliveryOutcome:
        return cls(DeliveryStatus.FAILED, error=error)

    @property
    def delivered(self) -> bool:
        return self.status is DeliveryStatus.SENT
