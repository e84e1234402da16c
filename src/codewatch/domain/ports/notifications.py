"""Port for the outbound message-delivery collaborator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from codewatch.domain.model import DeliveryOutcome, NotificationRequest


@runtime_checkable
class NotificationGateway(Protocol):
    """Delivers a rendered alert and reports the outcome."""

    async def send(self, request: NotificationRequest) -> DeliveryOutcome: ...


__all__ = ["NotificationGateway"]
