"""Decide whether a sync warrants an owner alert, render it, and record the outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from codewatch.domain.model import (
    ActivityLogEntry,
    ActivityType,
    DeliveryOutcome,
    NotificationRequest,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from codewatch.domain.model import Authority, NotificationSettings, Property
    from codewatch.domain.ports.notifications import NotificationGateway

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    """What a property sync found, as far as alerting is concerned."""

    address: str
    new_violations: int
    critical_count: int
    authorities: Sequence[Authority] = field(default_factory=tuple)


def should_notify(
    settings: NotificationSettings,
    outcome: SyncOutcome,
    *,
    notify_on_new_critical: bool = True,
) -> bool:
    return notify_on_new_critical and settings.can_notify and outcome.new_violations > 0


def build_message(outcome: SyncOutcome) -> str:
    plural = "s" if outcome.new_violations != 1 else ""
    message = f"{outcome.new_violations} new violation{plural} found at {outcome.address}"
    if outcome.critical_count > 0:
        message += f" - {outcome.critical_count} CRITICAL (Stop Work/Vacate)"
    authorities = ", ".join(authority.value for authority in outcome.authorities)
    if authorities:
        message += f". Authorities: {authorities}"
    return message + ". Log in to review."


def mask_contact(contact: str) -> str:
    digits = "".join(ch for ch in contact if ch.isalnum())
    return f"***{digits[-4:]}" if len(digits) > 4 else "***"


@dataclass(slots=True)
class DispatchResult:
    request: NotificationRequest
    outcome: DeliveryOutcome

    def activity_entry(self) -> ActivityLogEntry:
        contact = mask_contact(self.request.contact)
        if self.outcome.delivered:
            return ActivityLogEntry(
                property_id=self.request.property_id,
                activity_type=ActivityType.NOTIFICATION_SENT,
                title="SMS Alert Sent",
                description=f"Violation alert sent to {contact}",
                details={
                    "message": self.request.body,
                    "provider_message_id": self.outcome.provider_message_id,
                    "sync_run_id": str(self.request.sync_run_id),
                },
            )
        return ActivityLogEntry(
            property_id=self.request.property_id,
            activity_type=ActivityType.NOTIFICATION_FAILED,
            title="SMS Alert Failed",
            description=f"Violation alert to {contact} could not be delivered",
            details={
                "message": self.request.body,
                "error": self.outcome.error,
                "sync_run_id": str(self.request.sync_run_id),
            },
        )


@dataclass(slots=True)
class NotificationDispatcher:
    gateway: NotificationGateway | None

    async def dispatch(
        self,
        prop: Property,
        outcome: SyncOutcome,
        *,
        sync_run_id: UUID,
        notify_on_new_critical: bool = True,
    ) -> DispatchResult | None:
        """Send an alert when the gate passes. Never raises for delivery problems."""

        settings = prop.notifications
        contact = settings.contact
        if contact is None or not should_notify(
            settings, outcome, notify_on_new_critical=notify_on_new_critical
        ):
            return None

        request = NotificationRequest(
            contact=contact,
            body=build_message(outcome),
            property_id=prop.id,
            sync_run_id=sync_run_id,
        )
        if self.gateway is None:
            log.warning(f"No delivery gateway configured; alert for {prop.id} not sent")
            return DispatchResult(request, DeliveryOutcome.failed("delivery gateway not configured"))

        try:
            delivery = await self.gateway.send(request)
        except Exception as exc:  # noqa: BLE001
            log.warning(f"Delivery gateway raised for property {prop.id}: {exc}")
            delivery = DeliveryOutcome.failed(str(exc))

        if delivery.delivered:
            log.info(f"Alert sent for property {prop.id}")
        else:
            log.warning(f"Alert for property {prop.id} failed: {delivery.error}")
        return DispatchResult(request, delivery)
